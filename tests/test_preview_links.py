from texteditor.cache import MemoryLinkCache
from texteditor.signing import PreviewLinkSigner


def test_cache_returns_value_until_expired():
    cache = MemoryLinkCache()
    cache.set("filesalt_/alice/files/a.html", "tok", 300)
    cache.set("filesalt_/alice/files/b.html", "old", -1)

    assert cache.get("filesalt_/alice/files/a.html") == "tok"
    assert cache.get("filesalt_/alice/files/b.html") is None
    assert cache.get("filesalt_/missing") is None


def test_secret_link_verifies_only_with_issuing_token():
    signer = PreviewLinkSigner()

    link = signer.get_secret_link("/alice/files/my page.html", 1893456000, "tok", "salt", "/preview/")

    assert link.startswith("/preview/alice/files/my%20page.html?expires=1893456000&signature=")
    signature = link.rsplit("signature=", 1)[1]
    assert signer.verify(
        secret_path="/alice/files/my page.html", expires=1893456000, token="tok", salt="salt", signature=signature
    )
    assert not signer.verify(
        secret_path="/alice/files/my page.html", expires=1893456000, token="other", salt="salt", signature=signature
    )
    assert not signer.verify(
        secret_path="/alice/files/my page.html", expires=1893456001, token="tok", salt="salt", signature=signature
    )


def test_secret_link_with_domain():
    link = PreviewLinkSigner().get_secret_link("/a/files/x.html", 1, "t", "s", "/p", "https://cdn.example.org/")

    assert link.startswith("https://cdn.example.org/p/a/files/x.html?expires=1&signature=")
