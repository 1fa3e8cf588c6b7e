import dataclasses
import logging
import os
import typing

import yaml

import flero.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SequencerConfig:

	"""
	Settings for building a sequencer and its MIDI output.
	"""

	tempo: float = flero.constants.DEFAULT_TEMPO
	lookahead_seconds: float = flero.constants.LOOKAHEAD_SECONDS
	schedule_interval_ms: float = flero.constants.SCHEDULE_INTERVAL_MS
	loop_length: float = flero.constants.LOOP_LENGTH_BEATS
	waveform: str = flero.constants.DEFAULT_WAVEFORM
	gain: float = flero.constants.OUTPUT_GAIN
	output_device_name: typing.Optional[str] = None


	def __post_init__ (self) -> None:

		"""
		Validate every setting.
		"""

		if not self.tempo > 0:
			raise ValueError("Tempo must be positive")

		if not self.lookahead_seconds >= 0:
			raise ValueError("Lookahead cannot be negative")

		if not self.schedule_interval_ms > 0:
			raise ValueError("Schedule interval must be positive")

		if not self.loop_length > 0:
			raise ValueError("Loop length must be positive")

		if not 0 < self.gain <= 1:
			raise ValueError("Gain must be in (0, 1]")

		if self.waveform not in flero.constants.WAVEFORM_PROGRAMS:
			raise ValueError(f"Unknown waveform {self.waveform!r}. Available: {sorted(flero.constants.WAVEFORM_PROGRAMS)}")

		if self.lookahead_seconds * 1000 <= self.schedule_interval_ms:
			logger.warning(
				f"Lookahead ({self.lookahead_seconds * 1000:.0f} ms) does not exceed the schedule interval "
				f"({self.schedule_interval_ms:.0f} ms) - notes may be late"
			)


	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "SequencerConfig":

		"""Build a config from the parsed YAML document.

		Recognised layout (every key optional):

			sequencer:
			  tempo: 144
			  lookahead_seconds: 0.1
			  schedule_interval_ms: 25
			  loop_length: 8
			  waveform: sine
			midi:
			  device_name: "IAC Driver Bus 1"
			  gain: 0.25
		"""

		if not isinstance(data, dict):
			raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

		sequencer = data.get('sequencer') or {}
		midi = data.get('midi') or {}

		for name, section in (('sequencer', sequencer), ('midi', midi)):
			if not isinstance(section, dict):
				raise ValueError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")

		known = {field.name for field in dataclasses.fields(cls)}
		unknown = set(sequencer) - known

		if unknown:
			logger.warning(f"Ignoring unknown sequencer settings: {sorted(unknown)}")

		kwargs = {key: value for key, value in sequencer.items() if key in known}

		if 'device_name' in midi:
			kwargs['output_device_name'] = midi['device_name']

		if 'gain' in midi:
			kwargs['gain'] = midi['gain']

		return cls(**kwargs)


	def sequencer_options (self) -> typing.Dict[str, typing.Any]:

		"""
		Keyword arguments for ``flero.scheduler.create_sequencer()``.
		"""

		return {
			'lookahead_seconds': self.lookahead_seconds,
			'schedule_interval_ms': self.schedule_interval_ms,
			'loop_length': self.loop_length,
			'waveform': self.waveform,
		}


def load_config (config_path: str = 'flero.yaml') -> SequencerConfig:

	"""
	Load settings from a YAML file, falling back to defaults if it does not exist.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return SequencerConfig()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f) or {}

	return SequencerConfig.from_dict(data)
