"""Scheduling drift benchmark.

Drives the scheduler tick by tick against a simulated audio clock, with random
jitter added to every tick, and measures how far each queued note lands from
its ideal time.  For comparison it also computes note times the naive way, by
adding one beat duration after another, to show the error that chaining
floating-point increments accumulates.

Usage:
    python benchmarks/timeline_drift.py [--bpm BPM] [--loops N] [--jitter-ms MS]
                                        [--seed SEED]

Options:
    --bpm BPM           Tempo in BPM (default: 144)
    --loops N           Number of 8-beat loops to simulate (default: 2000)
    --jitter-ms MS      Maximum random lateness of each tick (default: 15)
    --seed SEED         Random seed for the tick jitter (default: 1)
"""

import argparse
import logging
import random

# Suppress scheduler logging during benchmark - we want clean output.
logging.basicConfig(level=logging.ERROR)

import flero.note_sequence
import flero.scheduler
import flero.tuning

# ---------------------------------------------------------------------------

LOOP_LENGTH = 8
TICK_SECONDS = 0.025


class SimulatedOutput:

	"""Audio output with a clock the benchmark advances by hand."""

	def __init__ (self) -> None:

		self.current_time = 0.0
		self.starts: list[float] = []


	def schedule_tone (self, waveform: str, frequency: float, start_time: float, stop_time: float) -> None:

		self.starts.append(start_time)


	def cancel_scheduled (self, after_time: float) -> None:

		self.starts = [start for start in self.starts if start < after_time]


def _run_benchmark (bpm: float, loops: int, jitter_ms: float, seed: int) -> tuple[list[float], list[float]]:

	"""Return (re-anchored errors, naive errors) in seconds for every queued note."""

	rng = random.Random(seed)
	output = SimulatedOutput()
	note_sequence = flero.note_sequence.create_empty_note_sequence()

	# One note per half beat, as in a straight eighth-note line.
	for step in range(LOOP_LENGTH * 2):
		note_sequence.add_note(flero.note_sequence.create_note(start=step / 2, length=0.5, number=step % 5))

	scheduler = flero.scheduler.create_sequencer(
		scale = flero.tuning.create_octave_scale("major_pentatonic"),
		tempo = bpm,
		audio_output = output,
		note_sequence = note_sequence,
		loop_length = LOOP_LENGTH
	)

	seconds_per_step = 60.0 / bpm / 2
	end_time = loops * LOOP_LENGTH * 60.0 / bpm - 0.5
	tick = 0

	while True:
		output.current_time = tick * TICK_SECONDS + rng.uniform(0, jitter_ms / 1000)
		if output.current_time > end_time:
			break
		scheduler.schedule_notes()
		tick += 1

	anchored_errors: list[float] = []
	naive_errors: list[float] = []
	naive_time = 0.0

	for index, start in enumerate(output.starts):
		ideal = index * 60.0 / bpm / 2
		anchored_errors.append(abs(start - ideal))
		naive_errors.append(abs(naive_time - ideal))
		naive_time += seconds_per_step

	return anchored_errors, naive_errors


def _print_report (anchored: list[float], naive: list[float], bpm: float, loops: int, jitter_ms: float) -> None:

	if not anchored:
		print("No notes were scheduled.")
		return

	print(f"\nScheduling Drift Benchmark - {loops} loops at {bpm:.0f} BPM (tick jitter up to {jitter_ms:.1f} ms)")
	print(f"{'-' * 66}")
	print(f"  Notes queued        : {len(anchored)}")
	print(f"  Simulated duration  : {len(anchored) * 30.0 / bpm:.1f} s")
	print(f"{'-' * 66}")
	print(f"  Re-anchored max err : {max(anchored) * 1e9:>12.3f} ns")
	print(f"  Re-anchored last err: {anchored[-1] * 1e9:>12.3f} ns")
	print(f"  Chained max err     : {max(naive) * 1e9:>12.3f} ns")
	print(f"  Chained last err    : {naive[-1] * 1e9:>12.3f} ns")
	print(f"{'-' * 66}")
	print()


def main () -> None:

	parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
	parser.add_argument("--bpm",       type=float, default=144,  help="Tempo in BPM (default: 144)")
	parser.add_argument("--loops",     type=int,   default=2000, help="Loops to simulate (default: 2000)")
	parser.add_argument("--jitter-ms", type=float, default=15.0, help="Maximum tick lateness in ms (default: 15)")
	parser.add_argument("--seed",      type=int,   default=1,    help="Random seed (default: 1)")
	args = parser.parse_args()

	anchored, naive = _run_benchmark(args.bpm, args.loops, args.jitter_ms, args.seed)
	_print_report(anchored, naive, args.bpm, args.loops, args.jitter_ms)


if __name__ == "__main__":
	main()
