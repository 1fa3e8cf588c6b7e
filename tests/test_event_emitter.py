import pytest

import flero.event_emitter


def test_on_and_emit () -> None:

	"""Registered callbacks receive the emitted arguments."""

	emitter = flero.event_emitter.EventEmitter()
	received: list[int] = []

	emitter.on("tempo", lambda v: received.append(v))
	emitter.emit("tempo", 120)

	assert received == [120]


def test_emit_unknown_event_is_silent () -> None:

	"""Emitting an event nobody listens to does nothing."""

	emitter = flero.event_emitter.EventEmitter()

	emitter.emit("change")

	assert emitter.listener_count("change") == 0


def test_on_returns_callback_as_handle () -> None:

	"""The handle returned by on() removes the same callback."""

	emitter = flero.event_emitter.EventEmitter()
	received: list[None] = []

	handle = emitter.on("change", lambda: received.append(None))
	emitter.off("change", handle)
	emitter.emit("change")

	assert received == []


def test_callbacks_run_in_registration_order () -> None:

	"""Listeners fire in the order they were added."""

	emitter = flero.event_emitter.EventEmitter()
	order: list[str] = []

	emitter.on("change", lambda: order.append("a"))
	emitter.on("change", lambda: order.append("b"))
	emitter.on("change", lambda: order.append("c"))
	emitter.emit("change")

	assert order == ["a", "b", "c"]


def test_off_only_removes_target_callback () -> None:

	"""off() leaves other callbacks for the same event intact."""

	emitter = flero.event_emitter.EventEmitter()
	a: list[int] = []
	b: list[int] = []

	def cb_a (v: int) -> None:
		a.append(v)

	def cb_b (v: int) -> None:
		b.append(v)

	emitter.on("loop", cb_a)
	emitter.on("loop", cb_b)
	emitter.off("loop", cb_a)
	emitter.emit("loop", 7)

	assert a == []
	assert b == [7]
	assert emitter.listener_count("loop") == 1


def test_off_raises_for_unregistered_callback () -> None:

	"""off() raises ValueError naming the event when the callback was never registered."""

	emitter = flero.event_emitter.EventEmitter()

	with pytest.raises(ValueError, match="change"):
		emitter.off("change", lambda: None)


def test_listener_exception_propagates () -> None:

	"""Errors raised by a listener reach the caller of emit()."""

	emitter = flero.event_emitter.EventEmitter()

	def broken () -> None:
		raise RuntimeError("boom")

	emitter.on("change", broken)

	with pytest.raises(RuntimeError, match="boom"):
		emitter.emit("change")
