"""Tests for blockdoc utility modules."""

import logging


class TestHashStr:
    """Tests for hash_str function."""

    def test_sha256_hex_digest(self) -> None:
        from blockdoc.utils.hashing import hash_str

        assert hash_str("hello") == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )

    def test_unicode(self) -> None:
        from blockdoc.utils.hashing import hash_str

        assert hash_str("café") != hash_str("cafe")

    def test_lone_surrogate_hashes(self) -> None:
        from blockdoc.utils.hashing import hash_str

        assert hash_str("a\ud800b") != hash_str("ab")
        assert len(hash_str("a\ud800b")) == 64


class TestGetLogger:
    """Tests for get_logger function."""

    def test_prefixes_name(self) -> None:
        from blockdoc.utils.logger import get_logger

        assert get_logger("mymodule").name == "blockdoc.mymodule"

    def test_package_names_unchanged(self) -> None:
        from blockdoc.utils.logger import get_logger

        assert get_logger("blockdoc.parser").name == "blockdoc.parser"
        assert get_logger("blockdoc").name == "blockdoc"

    def test_similar_prefix_is_namespaced(self) -> None:
        from blockdoc.utils.logger import get_logger

        assert get_logger("blockdocs").name == "blockdoc.blockdocs"

    def test_returns_stdlib_logger(self) -> None:
        from blockdoc.utils.logger import get_logger

        assert isinstance(get_logger("x"), logging.Logger)
