from lockgate.security.android_security import bind_pause_lock, read_keystore_key


class DummyApp:
    def __init__(self):
        self.events = []

    def on_pause(self):
        self.events.append("app_pause")
        return False

    def on_resume(self):
        self.events.append("app_resume")


class DummyController:
    def __init__(self, events):
        self.events = events

    def on_background(self):
        self.events.append("lock_background")
        return True

    def on_foreground(self):
        self.events.append("lock_foreground")
        return False


def test_pause_and_resume_notify_lock_gate_first():
    app = DummyApp()
    controller = DummyController(app.events)

    bind_pause_lock(app, controller)

    assert app.on_pause() is True
    assert app.on_resume() is True
    assert app.events == ["lock_background", "app_pause", "lock_foreground", "app_resume"]


def test_missing_app_is_ignored():
    bind_pause_lock(None, DummyController([]))


def test_keystore_key_is_absent_off_device():
    assert read_keystore_key("lockgate_master") is None
