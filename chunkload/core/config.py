"""
Transport configuration module.

Dataclass configuration for the aiohttp based transport. The engine sets no
timeouts of its own; whatever is configured here is what aborts a stuck
request.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
from urllib.parse import quote, urlsplit, urlunsplit
import ssl


@dataclass
class ProxyConfig:
    """
    Proxy every chunk request is routed through.

    aiohttp takes the proxy per request as a URL, so credentials travel
    inside it. They are percent-encoded; a URL that already carries
    credentials is passed on untouched.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Proxy URL for ``ClientSession.post(proxy=...)``."""
        if not self.url:
            return None

        parts = urlsplit(self.url)
        if not self.username or not parts.netloc or '@' in parts.netloc:
            return self.url

        userinfo = quote(self.username, safe='')
        if self.password:
            userinfo += ':' + quote(self.password, safe='')
        return urlunsplit(parts._replace(netloc=f"{userinfo}@{parts.netloc}"))


@dataclass
class SSLConfig:
    """
    TLS settings of the upload connection.

    ``verify=False`` is what ``TransportConfig.insecure()`` and the CLI's
    ``--insecure`` flag set, for endpoints with self-signed certificates.
    ``cert_file``/``key_file`` supply a client certificate to servers that
    require one.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Value for the connector's ``ssl`` argument; False skips verification."""
        if not self.verify:
            return False

        context = ssl.create_default_context(cafile=self.ca_file)
        if self.cert_file:
            context.load_cert_chain(self.cert_file, keyfile=self.key_file)
        context.check_hostname = self.check_hostname
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    None disables the corresponding limit; large chunks on slow links may
    legitimately take minutes.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: Optional[float] = 300.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class TransportConfig:
    """
    Complete transport configuration.

    Attributes:
        user_agent: User-Agent header sent with every request
        proxy: Optional proxy settings
        ssl: TLS settings
        timeout: Request timeouts
        extra_headers: Headers added to the client session
        progress_slice_size: Size of the body slices written to the socket;
            one progress callback fires per slice
        limit: Connection pool size
        limit_per_host: Connection pool size per host
    """
    user_agent: str = 'chunkload/1.0.0'
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    extra_headers: Dict[str, str] = field(default_factory=dict)
    progress_slice_size: int = 64 * 1024
    limit: int = 100
    limit_per_host: int = 10

    def __post_init__(self):
        if self.progress_slice_size <= 0:
            raise ValueError("progress_slice_size must be positive")

    @classmethod
    def default(cls) -> 'TransportConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'TransportConfig':
        """Create configuration with proxy."""
        return cls(proxy=ProxyConfig(url=proxy_url), **kwargs)

    @classmethod
    def insecure(cls, **kwargs) -> 'TransportConfig':
        """Create configuration with SSL verification disabled."""
        return cls(ssl=SSLConfig(verify=False, check_hostname=False), **kwargs)

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
