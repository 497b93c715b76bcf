from enum import Enum, auto
from typing import List, Dict, Optional
import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


class DiplomaticStatus(Enum):
    ALLIED = auto()
    NEUTRAL = auto()
    HOSTILE = auto()


class DiplomaticActionType(Enum):
    BASIC = auto()
    TRADE = auto()
    ALLIANCE = auto()
    WAR_DECLARATION = auto()
    TREATY = auto()


INITIAL_SCORES = {
    DiplomaticStatus.ALLIED: 75.0,
    DiplomaticStatus.NEUTRAL: 0.0,
    DiplomaticStatus.HOSTILE: -75.0,
}


class DiplomaticRelation:
    """Relation with one other nation; score runs from -100 (hostile) to 100 (allied)."""

    def __init__(self, nation_id: str, initial_status: DiplomaticStatus = DiplomaticStatus.NEUTRAL):
        self.nation_id = nation_id
        self.status = initial_status
        self.relation_score = INITIAL_SCORES[initial_status]
        self.trade_value = 0.0
        self.has_treaty = False
        self.turns_in_current_status = 0

    def can_perform_action(self, action: DiplomaticActionType) -> bool:
        if action == DiplomaticActionType.TRADE:
            return self.relation_score >= -25
        if action == DiplomaticActionType.ALLIANCE:
            return self.relation_score >= 50
        if action == DiplomaticActionType.WAR_DECLARATION:
            return self.relation_score <= -50
        if action == DiplomaticActionType.TREATY:
            return self.relation_score >= 25
        return True

    def update_relation_score(self, change: float):
        self.relation_score = float(np.clip(self.relation_score + change, -100.0, 100.0))
        self._update_status_from_score()

    def _update_status_from_score(self):
        # Hysteresis: a status only flips once the score is well past the boundary
        if self.relation_score >= 60 and self.status != DiplomaticStatus.ALLIED:
            self._change_status(DiplomaticStatus.ALLIED)
        elif self.relation_score <= -60 and self.status != DiplomaticStatus.HOSTILE:
            self._change_status(DiplomaticStatus.HOSTILE)
        elif -30 < self.relation_score < 30 and self.status != DiplomaticStatus.NEUTRAL:
            self._change_status(DiplomaticStatus.NEUTRAL)

    def _change_status(self, status: DiplomaticStatus):
        self.status = status
        self.turns_in_current_status = 0

    def process_turn(self):
        """Relations drift back toward zero by half a point per turn."""
        self.turns_in_current_status += 1
        if self.relation_score > 0:
            self.relation_score = max(self.relation_score - 0.5, 0.0)
        elif self.relation_score < 0:
            self.relation_score = min(self.relation_score + 0.5, 0.0)

    def get_summary(self) -> str:
        score = self.relation_score
        label = ("Excellent" if score > 50 else "Good" if score > 25 else
                 "Neutral" if score > -25 else "Poor" if score > -50 else "Hostile")
        return (f"Relations with {self.nation_id}: {label} ({score:.0f})\n"
                f"Status: {self.status.name.title()} for {self.turns_in_current_status} turns\n"
                f"Trade Value: {self.trade_value:.0f}\n"
                f"Treaty: {'Yes' if self.has_treaty else 'No'}")


@dataclass
class DiplomaticEvent:
    nation_id: str
    reputation_change: float
    description: str
    status_after_event: DiplomaticStatus


class NationDiplomacyComponent:
    """
    Relations of one nation with every other nation it has dealt with.
    Relations are created lazily as Neutral on first lookup.
    """
    MAX_RECENT_EVENTS = 10

    def __init__(self):
        self.relations: Dict[str, DiplomaticRelation] = {}
        self.global_reputation = 0.5  # 0-1
        self.influence = 50.0
        self.recent_events: List[DiplomaticEvent] = []

    def _get_or_create(self, nation_id: str) -> DiplomaticRelation:
        relation = self.relations.get(nation_id)
        if relation is None:
            relation = DiplomaticRelation(nation_id)
            self.relations[nation_id] = relation
        return relation

    def get_relation(self, nation_id: str) -> Optional[DiplomaticRelation]:
        if not nation_id:
            return None
        return self._get_or_create(nation_id)

    def get_status(self, nation_id: str) -> DiplomaticStatus:
        if not nation_id:
            return DiplomaticStatus.NEUTRAL
        return self._get_or_create(nation_id).status

    def set_status(self, nation_id: str, status: DiplomaticStatus):
        if not nation_id:
            return
        relation = self._get_or_create(nation_id)
        relation.status = status
        relation.turns_in_current_status = 0
        if status == DiplomaticStatus.ALLIED:
            relation.relation_score = max(relation.relation_score, 60.0)
        elif status == DiplomaticStatus.HOSTILE:
            relation.relation_score = min(relation.relation_score, -60.0)
        logger.debug(f"Diplomatic status with {nation_id} set to {status.name}")

    def apply_event(self, nation_id: str, reputation_change: float, description: str = ""):
        if not nation_id:
            return
        relation = self._get_or_create(nation_id)
        relation.update_relation_score(reputation_change)
        self.recent_events.append(DiplomaticEvent(nation_id, reputation_change, description, relation.status))
        self.recent_events = self.recent_events[-self.MAX_RECENT_EVENTS:]
        self._update_reputation(reputation_change * 0.01)
        logger.debug(f"Diplomatic event with {nation_id}: {description} ({reputation_change:+.1f})")

    def apply_global_event(self, reputation_change: float, description: str = ""):
        self._update_reputation(reputation_change * 0.02)
        for relation in self.relations.values():
            relation.update_relation_score(reputation_change)
        logger.debug(f"Global diplomatic event: {description} ({reputation_change:+.1f})")

    def can_perform_action(self, nation_id: str, action: DiplomaticActionType) -> bool:
        if not nation_id:
            return False
        return self._get_or_create(nation_id).can_perform_action(action)

    def _update_reputation(self, change: float):
        self.global_reputation = float(np.clip(self.global_reputation + change, 0.0, 1.0))

    def process_turn(self):
        for relation in self.relations.values():
            relation.process_turn()

        if self.global_reputation > 0.5:
            self.global_reputation = max(self.global_reputation - 0.01, 0.5)
        elif self.global_reputation < 0.5:
            self.global_reputation = min(self.global_reputation + 0.01, 0.5)

        self.influence += 5.0 * self.global_reputation

    def spend_influence(self, amount: float) -> bool:
        if amount > self.influence:
            return False
        self.influence -= amount
        return True

    def relation_count(self) -> int:
        return len(self.relations)

    def get_summary(self) -> str:
        lines = [
            f"Global Reputation: {self.global_reputation:.0%}",
            f"Diplomatic Influence: {self.influence:.0f} points",
            f"Relations with {len(self.relations)} nations:",
        ]
        for relation in self.relations.values():
            lines.append(f"- {relation.nation_id}: {relation.status.name.title()} ({relation.relation_score:.0f})")
        if self.recent_events:
            lines.append("")
            lines.append("Recent Diplomatic Events:")
            for event in reversed(self.recent_events):
                lines.append(f"- {event.description} with {event.nation_id} ({event.reputation_change:+.1f})")
        return "\n".join(lines)
