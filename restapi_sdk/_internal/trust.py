"""TLS trust configuration for secure connections.

A TrustPolicy is turned into a dedicated ``ssl.SSLContext`` for every secure
connection. Nothing here touches process-wide TLS defaults, so concurrent
sends with different policies do not interfere.
"""

import ssl
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict

from restapi_sdk.exceptions import RestApiConfigError

TlsProtocol = Literal["TLS", "TLSv1.2", "TLSv1.3"]

_MINIMUM_VERSIONS: dict[str, ssl.TLSVersion] = {
    "TLSv1.2": ssl.TLSVersion.TLSv1_2,
    "TLSv1.3": ssl.TLSVersion.TLSv1_3,
}


def accept_all_hosts(hostname: str) -> bool:
    """Hostname verifier that accepts every host."""
    return True


class TrustPolicy(BaseModel):
    """TLS trust material for a secure connection.

    The default policy trusts every certificate chain and every hostname.
    That is only suitable for internal or test environments; use
    ``TrustPolicy.strict()`` for public endpoints.

    Fields:
        hostname_verifier: Called with the target hostname. Returning True
            skips hostname matching for that host; returning False enforces it.
        verify_chain: Validate the server certificate chain. False accepts
            any chain.
        ca_file: Optional CA bundle used when verify_chain is True.
        cert_file: Optional client certificate (PEM).
        key_file: Optional private key for cert_file.
        key_password: Optional password for key_file.
        protocol: "TLS" negotiates the best version; "TLSv1.2"/"TLSv1.3" set
            the minimum accepted version.
    """

    model_config = ConfigDict(frozen=True)

    hostname_verifier: Callable[[str], bool] = accept_all_hosts
    verify_chain: bool = False
    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    key_password: str | None = None
    protocol: TlsProtocol = "TLS"

    @classmethod
    def strict(cls, ca_file: str | None = None) -> "TrustPolicy":
        """Policy that validates both the chain and the hostname."""
        return cls(
            hostname_verifier=lambda hostname: False,
            verify_chain=True,
            ca_file=ca_file,
        )

    def build_ssl_context(self, hostname: str) -> ssl.SSLContext:
        """Build a fresh SSLContext for one connection to ``hostname``.

        Raises:
            RestApiConfigError: If the CA bundle or key material cannot be loaded.
        """
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        minimum = _MINIMUM_VERSIONS.get(self.protocol)
        if minimum is not None:
            context.minimum_version = minimum

        # check_hostname must be cleared before verify_mode can drop to CERT_NONE
        context.check_hostname = self.verify_chain and not self.hostname_verifier(hostname)
        if self.verify_chain:
            context.verify_mode = ssl.CERT_REQUIRED
            try:
                if self.ca_file:
                    context.load_verify_locations(cafile=self.ca_file)
                else:
                    context.load_default_certs()
            except (OSError, ssl.SSLError) as e:
                raise RestApiConfigError(f"Cannot load CA bundle: {e}") from e
        else:
            context.verify_mode = ssl.CERT_NONE

        if self.cert_file:
            try:
                context.load_cert_chain(
                    self.cert_file, keyfile=self.key_file, password=self.key_password
                )
            except (OSError, ssl.SSLError) as e:
                raise RestApiConfigError(f"Cannot load client key material: {e}") from e
        return context
