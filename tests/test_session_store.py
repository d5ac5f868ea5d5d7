import asyncio
import json

from conftest import BASE_URL, FakePage
from genesis_comps.browser.session_store import (
    CLEAR_LOCAL_STORAGE_JS,
    DUMP_LOCAL_STORAGE_JS,
    SessionStore,
    restore_script,
)
from genesis_comps.models import Session

COOKIES = [
    {
        "name": "auth",
        "value": "token-1",
        "domain": "genesis.propelio.com",
        "path": "/",
        "expires": -1,
        "httpOnly": True,
        "secure": True,
        "sameSite": "Lax",
    },
    {
        "name": "_ga",
        "value": "GA1.2.3",
        "domain": ".propelio.com",
        "path": "/",
        "expires": 1900000000,
        "httpOnly": False,
        "secure": False,
        "sameSite": "None",
    },
]
STORAGE = {"accessToken": "abc.def", "user": '{"id": 7}'}


def _logged_in_page() -> FakePage:
    page = FakePage(url=f"{BASE_URL}/dashboard", scripts={DUMP_LOCAL_STORAGE_JS: dict(STORAGE)})
    page.context._cookies = [dict(c) for c in COOKIES]
    return page


def test_save_then_restore_round_trip(tmp_path):
    store = SessionStore(tmp_path / "session.json")
    asyncio.run(store.save(_logged_in_page()))

    loaded = store.load()
    assert loaded is not None
    assert loaded.cookies == COOKIES
    assert loaded.local_storage == STORAGE

    fresh = FakePage()
    asyncio.run(store.restore(fresh, loaded, f"{BASE_URL}/login"))

    assert asyncio.run(fresh.context.cookies()) == COOKIES
    assert fresh.context.init_scripts == [restore_script(BASE_URL, STORAGE)]
    assert fresh.calls("goto") == []


def test_slot_document_shape(tmp_path):
    path = tmp_path / "session.json"
    asyncio.run(SessionStore(path).save(_logged_in_page()))

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {"cookies", "localStorage", "stale", "savedAt"}
    assert doc["stale"] is False
    assert not (tmp_path / "session.json.tmp").exists()


def test_save_overwrites_previous_slot(tmp_path):
    store = SessionStore(tmp_path / "session.json")
    asyncio.run(store.save(_logged_in_page()))

    page = FakePage(scripts={DUMP_LOCAL_STORAGE_JS: {"only": "one"}})
    asyncio.run(store.save(page))

    loaded = store.load()
    assert loaded.cookies == []
    assert loaded.local_storage == {"only": "one"}


def test_load_is_absent_for_missing_or_corrupt_slot(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    assert store.load() is None

    path.write_text("{not json", encoding="utf-8")
    assert store.load() is None


def test_invalidate_keeps_document_but_hides_it(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    asyncio.run(store.save(_logged_in_page()))

    store.invalidate()

    assert path.exists()
    assert store.load() is None
    doc = Session.model_validate_json(path.read_text(encoding="utf-8"))
    assert doc.stale is True
    assert doc.cookies == COOKIES


def test_clear_removes_slot(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    asyncio.run(store.save(_logged_in_page()))

    store.clear()
    store.clear()

    assert not path.exists()


def test_restore_script_is_origin_guarded():
    script = restore_script(BASE_URL, {"k": 'va"lue'})

    assert '"https://genesis.propelio.com"' in script
    assert json.dumps({"k": 'va"lue'}) in script


def test_discard_empties_cookies_and_local_storage():
    page = _logged_in_page()
    storage = dict(STORAGE)
    page.scripts[CLEAR_LOCAL_STORAGE_JS] = lambda _arg: storage.clear()

    asyncio.run(SessionStore().discard(page))

    assert asyncio.run(page.context.cookies()) == []
    assert storage == {}
