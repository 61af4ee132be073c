"""Tests for the Session entity."""

from __future__ import annotations

from helpers import make_context

from cookie_session import Session, SessionConfig


class TestSessionConstruction:
    """Tests for creating sessions from raw data."""

    def test_no_data_is_new(self) -> None:
        session = Session(make_context())

        assert session.is_new is True
        assert session.length == 0
        assert session.populated is False

    def test_empty_mapping_is_not_new(self) -> None:
        """Only absent data marks a session new; an explicit {} does not."""
        session = Session(make_context(), {})

        assert session.is_new is False

    def test_hydrates_user_fields(self) -> None:
        session = Session(make_context(), {"user_id": 7, "cart": [1, 2]})

        assert session["user_id"] == 7
        assert session["cart"] == [1, 2]
        assert session.is_new is False

    def test_restores_max_age_into_context(self) -> None:
        """Test that the lifetime a session was saved with carries over."""
        context = make_context(SessionConfig(signed=False, max_age=60_000))
        session = Session(context, {"a": 1, "_maxAge": 5_000, "_expire": 123})

        assert context.max_age == 5_000
        assert session.max_age == 5_000
        assert session.meta.expire == 123
        assert "_maxAge" not in session.to_json()
        assert "_expire" not in session.to_json()

    def test_session_lifetime_flag_restores_sentinel(self) -> None:
        context = make_context()
        Session(context, {"a": 1, "_session": True})

        assert context.max_age == "session"

    def test_external_key(self) -> None:
        session = Session(make_context(), None, external_key="abc")

        assert session.external_key == "abc"


class TestSessionToJson:
    """Tests for the user-visible view of a session."""

    def test_excludes_reserved_and_callables(self) -> None:
        session = Session(make_context(), {"visible": 1, "_private": 2})
        session["handler"] = lambda: None

        assert session.to_json() == {"visible": 1}

    def test_iteration_and_len_follow_to_json(self) -> None:
        session = Session(make_context(), {"a": 1, "b": 2, "_hidden": 3})

        assert sorted(session) == ["a", "b"]
        assert len(session) == 2
        assert dict(session) == {"a": 1, "b": 2}

    def test_repr_is_to_json(self) -> None:
        session = Session(make_context(), {"a": 1})

        assert repr(session) == "{'a': 1}"

    def test_mutation(self) -> None:
        session = Session(make_context())
        session["a"] = 1
        session.update(b=2)
        del session["a"]

        assert session.to_json() == {"b": 2}
        assert session.populated is True
        assert session.get("missing", "default") == "default"


class TestSessionFlags:
    """Tests for save/regenerate/max_age bookkeeping."""

    def test_max_age_reads_config(self) -> None:
        context = make_context(SessionConfig(signed=False, max_age=60_000))

        assert Session(context).max_age == 60_000

    def test_max_age_setter_requires_save(self) -> None:
        context = make_context()
        session = Session(context)

        session.max_age = 1_000

        assert context.max_age == 1_000
        assert session.meta.require_save is True

    def test_max_age_setter_does_not_touch_shared_config(self) -> None:
        config = SessionConfig(signed=False, max_age=60_000)
        session = Session(make_context(config))

        session.max_age = 1_000

        assert config.max_age == 60_000

    def test_save_requires_save(self) -> None:
        session = Session(make_context())
        session.save()

        assert session.meta.require_save is True

    def test_regenerate_keeps_data(self) -> None:
        session = Session(make_context(), {"a": 1})
        session.regenerate()

        assert session.meta.regenerate is True
        assert session["a"] == 1
