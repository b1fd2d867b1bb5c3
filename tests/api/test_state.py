import datetime as dt
import json
import threading

from apps.api import state
from packages.core.schedule.clock import ManualClock
from packages.core.schedule.engine import ReminderEngine


NOW = dt.datetime(2026, 10, 19, 8, 0, tzinfo=dt.timezone.utc)


def test_persist_writes_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("BREAKTIME_SETTINGS_PATH", str(tmp_path / "settings.json"))
    engine = ReminderEngine(clock=ManualClock(NOW))
    engine.create_interval("Eyes", 20, "minutes")

    state.persist(engine)
    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert [item["title"] for item in saved["customReminders"]] == ["Eyes"]


def test_persist_holds_engine_lock_while_saving(monkeypatch):
    engine = ReminderEngine(clock=ManualClock(NOW))
    contended = []

    def fake_save(settings):
        def try_lock():
            acquired = engine.lock.acquire(blocking=False)
            if acquired:
                engine.lock.release()
            contended.append(not acquired)

        worker = threading.Thread(target=try_lock)
        worker.start()
        worker.join()

    monkeypatch.setattr(state, "save_settings", fake_save)
    state.persist(engine)
    assert contended == [True]
