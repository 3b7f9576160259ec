from __future__ import annotations

from storefront.core.errors import ApiFailure, ValidationFailure
from storefront.ui.toasts import Toaster


def test_toaster_keeps_only_recent_toasts() -> None:
    toaster = Toaster(max_toasts=3)
    for n in range(5):
        toaster.success(f"Toast {n}")

    assert [t.title for t in toaster.toasts] == ["Toast 2", "Toast 3", "Toast 4"]
    assert toaster.last.title == "Toast 4"

    toaster.dismiss_all()
    assert toaster.last is None


def test_sink_sees_every_toast_even_past_the_cap() -> None:
    seen = []
    toaster = Toaster(sink=seen.append, max_toasts=1)
    toaster.success("first")
    toaster.error("second")

    assert [t.title for t in seen] == ["first", "second"]
    assert len(toaster.toasts) == 1


def test_show_error_maps_each_error_kind() -> None:
    toaster = Toaster()

    toasts = toaster.show_error(ValidationFailure(["Invalid email", "Invalid phone number"]))
    assert [t.description for t in toasts] == ["Invalid email", "Invalid phone number"]

    [toast] = toaster.show_error(ApiFailure("Item #9 not found", 404), "Could not load")
    assert toast.title == "Could not load"
    assert toast.description == "Item #9 not found"
    assert toast.is_error

    [toast] = toaster.show_error(RuntimeError("boom"))
    assert toast.title == "Something went wrong"
