import ssl
import warnings
from dataclasses import dataclass
from typing import Optional, Union
from pathlib import Path


@dataclass
class SSL:
    """
    SSL/TLS configuration for FTPS control connections.

    Only used for ftps:// endpoints. Leaving everything at its defaults lets
    aioftp build a verifying context of its own; setting any of the file or
    cipher options makes this class build the context instead.

    Attributes:
        verify: Whether to verify the server certificate.
        cert: Path to a client certificate, for servers that want one.
        key: Path to the private key matching the client certificate.
        bundle: Path to a CA bundle to trust instead of the system store.
        ciphers: OpenSSL cipher list string.
        context: Ready-made SSLContext, or False to disable TLS setup entirely.
    """

    verify: bool = True  # Verify the server certificate
    cert: Optional[str] = None  # Client certificate file
    key: Optional[str] = None  # Client private key file
    bundle: Optional[str] = None  # CA bundle file
    ciphers: Optional[str] = None  # Allowed cipher suites
    context: Optional[Union[ssl.SSLContext, bool]] = None  # Context or False

    def __post_init__(self) -> None:
        """
        Validate the configuration and build an SSL context when needed.

        Raises:
            ValueError: If files are missing, the cert/key pair is incomplete,
                        or the context can't be built from the given options.
        """
        if bool(self.cert) != bool(self.key):
            raise ValueError("Both certificate and key must be provided together")

        for label, value in (("Certificate", self.cert), ("Private key", self.key), ("CA bundle", self.bundle)):
            if value and not Path(value).is_file():
                raise ValueError(f"{label} file not found: {value}")

        if self.context is not None and not isinstance(self.context, (ssl.SSLContext, bool)):
            raise ValueError("SSL context must be an SSLContext object, boolean, or None")

        if not self.verify:
            warnings.warn(
                "FTPS certificate verification is disabled. "
                "Only use this against servers you trust on networks you trust.",
                UserWarning,
                stacklevel=3,
            )

        # An explicit context always wins
        if self.context is not None:
            return

        if not any([self.cert, self.key, self.bundle, self.ciphers]):
            self.context = None if self.verify else self.unverified()
            return

        try:
            ctx = ssl.create_default_context()
        except ssl.SSLError as error:
            raise ValueError(f"Failed to create default SSL context: {error}")

        if not self.verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE

        try:
            if self.cert and self.key:
                ctx.load_cert_chain(self.cert, self.key)
            if self.bundle:
                ctx.load_verify_locations(cafile=self.bundle)
            if self.ciphers:
                ctx.set_ciphers(self.ciphers)
        except (ssl.SSLError, OSError) as error:
            raise ValueError(f"Invalid SSL configuration: {error}")

        self.context = ctx

    @staticmethod
    def unverified() -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx
