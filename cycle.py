"""
Business-cycle state machine.
Four phases of equal length repeat forever; each phase scales production,
consumption, investment, price inflation and unrest multiplicatively.
"""

from enum import Enum, auto
from typing import Dict, Optional
import copy

from config import CYCLE_COEFFICIENTS


class CyclePhase(Enum):
    EXPANSION = auto()
    PEAK = auto()
    CONTRACTION = auto()
    TROUGH = auto()


PHASE_DESCRIPTIONS = {
    CyclePhase.EXPANSION: "Economic Expansion: The economy is growing steadily with increasing production and investment.",
    CyclePhase.PEAK: "Economic Peak: The economy is at its strongest point, with high consumption but rising inflation.",
    CyclePhase.CONTRACTION: "Economic Contraction: The economy is slowing down with falling production and investment.",
    CyclePhase.TROUGH: "Economic Trough: The economy is at its weakest point, with low consumption and high unrest.",
}


class EconomicCycleCalculator:
    """Tracks the current phase and applies its coefficients."""

    def __init__(self, cycle_length: int = 12,
                 coefficients: Optional[Dict[str, Dict[str, float]]] = None):
        self.cycle_length = max(4, int(cycle_length))
        self.current_phase = CyclePhase.EXPANSION
        self.phase_progress = 0.0
        self.turn_counter = 0
        source = CYCLE_COEFFICIENTS if coefficients is None else coefficients
        self.phase_coefficients: Dict[CyclePhase, Dict[str, float]] = {
            CyclePhase[name]: dict(values) for name, values in copy.deepcopy(source).items()
        }

    def phase_for_turn(self, turn: int):
        """
        Phase and intra-phase progress for an absolute turn number.

        Each of the first three phases lasts cycle_length // 4 turns. When the
        length is not a multiple of 4 the leftover turns all fall into Trough,
        e.g. a length of 6 gives one turn each of Expansion, Peak and
        Contraction followed by three turns of Trough.
        """
        phase_length = self.cycle_length // 4
        position = turn % self.cycle_length
        if position < phase_length:
            phase = CyclePhase.EXPANSION
        elif position < phase_length * 2:
            phase = CyclePhase.PEAK
        elif position < phase_length * 3:
            phase = CyclePhase.CONTRACTION
        else:
            phase = CyclePhase.TROUGH
        progress = min(1.0, (position % phase_length) / phase_length)
        return phase, progress

    def advance(self) -> CyclePhase:
        """Move one turn forward and return the (possibly new) phase."""
        self.turn_counter += 1
        self.current_phase, self.phase_progress = self.phase_for_turn(self.turn_counter)
        return self.current_phase

    def apply_effect(self, value: float, effect_name: str) -> float:
        coefficient = self.phase_coefficients.get(self.current_phase, {}).get(effect_name, 1.0)
        return value * coefficient

    def get_coefficient(self, effect_name: str) -> float:
        return self.phase_coefficients.get(self.current_phase, {}).get(effect_name, 1.0)

    def set_phase_coefficient(self, phase: CyclePhase, effect_name: str, value: float):
        self.phase_coefficients.setdefault(phase, {})[effect_name] = value

    def get_phase_description(self) -> str:
        return PHASE_DESCRIPTIONS[self.current_phase]
