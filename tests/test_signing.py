"""Tests for cookie signatures."""

from __future__ import annotations

import pytest

from cookie_session import CookieSigner


class TestCookieSigner:
    """Tests for CookieSigner."""

    def test_sign_and_verify(self) -> None:
        signer = CookieSigner("secret")
        signature = signer.sign("koa.sess", "value")

        assert signer.verify("koa.sess", "value", signature) is True

    def test_tampered_value_fails(self) -> None:
        signer = CookieSigner("secret")
        signature = signer.sign("koa.sess", "value")

        assert signer.verify("koa.sess", "other", signature) is False

    def test_signature_bound_to_cookie_name(self) -> None:
        """Test that a signature cannot be replayed under another cookie name."""
        signer = CookieSigner("secret")
        signature = signer.sign("koa.sess", "value")

        assert signer.verify("other", "value", signature) is False

    def test_missing_signature_fails(self) -> None:
        signer = CookieSigner("secret")

        assert signer.verify("koa.sess", "value", None) is False
        assert signer.verify("koa.sess", "value", "") is False

    def test_wrong_key_fails(self) -> None:
        signature = CookieSigner("secret").sign("koa.sess", "value")

        assert CookieSigner("other-secret").verify("koa.sess", "value", signature) is False

    def test_key_rotation(self) -> None:
        """Test that signatures made with an old key still verify after rotation."""
        old_signature = CookieSigner("old").sign("koa.sess", "value")
        rotated = CookieSigner(["old", "new"])

        assert rotated.verify("koa.sess", "value", old_signature) is True
        assert rotated.sign("koa.sess", "value") == CookieSigner("new").sign("koa.sess", "value")

    def test_empty_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="secret_keys cannot be empty"):
            CookieSigner([])

        with pytest.raises(ValueError, match="secret_keys cannot be empty"):
            CookieSigner("")

    def test_signature_name(self) -> None:
        assert CookieSigner.signature_name("koa.sess") == "koa.sess.sig"
