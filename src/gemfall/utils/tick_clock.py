from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class TickClock:
	"""Converts frame time into whole ticks for several independent cadences.

	``rates`` maps a cadence name to ticks per second. Leftover time carries over
	to the next frame so the long-run rate stays exact.
	"""

	rates: Dict[str, float]

	_elapsed: Dict[str, float] = field(init=False, repr=False)

	def __post_init__(self) -> None:
		self._elapsed = {name: 0.0 for name in self.rates}

	def advance(self, delta_time: float) -> Dict[str, int]:
		dt = max(0.0, float(delta_time))
		due: Dict[str, int] = {}
		for name, rate in self.rates.items():
			if rate <= 0:
				due[name] = 0
				continue
			period = 1.0 / rate
			elapsed = self._elapsed[name] + dt
			count = int(elapsed // period)
			self._elapsed[name] = elapsed - count * period
			due[name] = count
		return due

	def reset(self, name: str | None = None) -> None:
		if name is None:
			for key in self._elapsed:
				self._elapsed[key] = 0.0
		elif name in self._elapsed:
			self._elapsed[name] = 0.0
