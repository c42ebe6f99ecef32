import hashlib
import hmac
from urllib.parse import quote, urlencode


class PreviewLinkSigner:
    """Signs HTML preview links. The salt is the signing key; the share token is
    part of the signed message but never appears in the link itself."""

    def _message(self, *, secret_path: str, expires: int, token: str) -> bytes:
        return f"{secret_path}:{expires}:{token}".encode("utf-8")

    def sign(self, *, secret_path: str, expires: int, token: str, salt: str) -> str:
        msg = self._message(secret_path=secret_path, expires=expires, token=token)
        return hmac.new(salt.encode("utf-8"), msg, hashlib.sha256).hexdigest()

    def verify(self, *, secret_path: str, expires: int, token: str, salt: str, signature: str) -> bool:
        expected = self.sign(secret_path=secret_path, expires=expires, token=token, salt=salt)
        return hmac.compare_digest(expected, signature)

    def get_secret_link(
        self,
        secret_path: str,
        expires: int,
        token: str,
        salt: str,
        prefix: str,
        domain: str | None = None,
    ) -> str:
        signature = self.sign(secret_path=secret_path, expires=expires, token=token, salt=salt)
        params = urlencode({"expires": expires, "signature": signature})
        base = (domain or "").rstrip("/")
        return f"{base}{prefix.rstrip('/')}{quote(secret_path)}?{params}"
