import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A synchronous event emitter.

	Listeners are called in registration order, on the caller's thread, before
	``emit()`` returns.  A listener must not register or remove listeners for the
	event that is currently being emitted.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> CallbackType:

		"""
		Register a callback for an event name and return it as the removal handle.
		"""

		if event_name not in self._listeners:
			self._listeners[event_name] = []

		self._listeners[event_name].append(callback)

		return callback


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if event_name not in self._listeners or callback not in self._listeners[event_name]:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def listener_count (self, event_name: str) -> int:

		"""Number of callbacks registered for an event name."""

		return len(self._listeners.get(event_name, []))


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener registered for an event name.
		"""

		if event_name not in self._listeners:
			return

		for callback in self._listeners[event_name]:
			callback(*args, **kwargs)
