# src/runner/player.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple
from .config import (
    MAX_WALK_SPEED, MAX_RUN_SPEED, VELOCITY_FACTOR, DOUBLE_PRESS_S,
    JUMP_DURATION_S
)


class JumpPhase(Enum):
    GROUNDED = "grounded"
    SINGLE_JUMP = "single_jump"
    DOUBLE_JUMP = "double_jump"
    FALLING = "falling"


class Gait(Enum):
    IDLE = "idle"
    WALK = "walk"
    RUN = "run"


# (phase, event) -> next phase. Anything missing is ignored.
TRANSITIONS: Dict[Tuple[JumpPhase, str], JumpPhase] = {
    (JumpPhase.GROUNDED, "jump"): JumpPhase.SINGLE_JUMP,
    (JumpPhase.SINGLE_JUMP, "jump"): JumpPhase.DOUBLE_JUMP,
    (JumpPhase.SINGLE_JUMP, "land"): JumpPhase.GROUNDED,
    (JumpPhase.DOUBLE_JUMP, "land"): JumpPhase.GROUNDED,
    (JumpPhase.GROUNDED, "fall"): JumpPhase.FALLING,
    (JumpPhase.SINGLE_JUMP, "fall"): JumpPhase.FALLING,
    (JumpPhase.DOUBLE_JUMP, "fall"): JumpPhase.FALLING,
}


def jump_offset(progress: float, peak_height: float, double: bool = False) -> float:
    """Parabolic vertical offset (negative = up). 0 at both ends, -peak at half way."""
    p = min(max(progress, 0.0), 1.0)
    peak = 2 * peak_height if double else peak_height
    return -4 * peak * p * (1 - p)


@dataclass
class ActorKinematics:
    """
    Actor's horizontal speed and jump state:
    - speed eases towards target_speed (exponential approach)
    - jump_phase follows TRANSITIONS
    - (x, y) is the actor's top-left corner in screen space
    """
    x: float
    y: float
    speed: float = 0.0
    target_speed: float = 0.0
    velocity_factor: float = VELOCITY_FACTOR
    jump_phase: JumpPhase = JumpPhase.GROUNDED
    gait: Gait = Gait.IDLE
    jump_start_time: float = 0.0
    jump_duration: float = JUMP_DURATION_S
    last_move_key_time: Optional[float] = None
    move_key_held: bool = False
    distance_traveled: float = 0.0

    @property
    def airborne(self) -> bool:
        return self.jump_phase in (JumpPhase.SINGLE_JUMP, JumpPhase.DOUBLE_JUMP)

    @property
    def falling(self) -> bool:
        return self.jump_phase == JumpPhase.FALLING

    def fire(self, event: str) -> bool:
        """Apply a transition. Returns True if the phase changed."""
        nxt = TRANSITIONS.get((self.jump_phase, event))
        if nxt is None:
            return False
        self.jump_phase = nxt
        return True

    def press_move(self, now: float) -> Gait:
        """Key down: walk, or run on a quick second tap. Holding the key repeats nothing."""
        if not self.move_key_held:
            quick = (self.last_move_key_time is not None
                     and now - self.last_move_key_time < DOUBLE_PRESS_S)
            if quick:
                self.target_speed = MAX_RUN_SPEED
                self.gait = Gait.RUN
            else:
                self.target_speed = MAX_WALK_SPEED
                self.gait = Gait.WALK
        self.last_move_key_time = now
        self.move_key_held = True
        return self.gait

    def release_move(self) -> Gait:
        self.target_speed = 0.0
        self.gait = Gait.IDLE
        self.move_key_held = False
        return self.gait

    def try_jump(self, now: float, duration: float = JUMP_DURATION_S) -> bool:
        """Grounded -> single, single -> double. Restarts the arc clock on success."""
        if self.fire("jump"):
            self.jump_start_time = now
            self.jump_duration = duration
            return True
        return False

    def smooth_speed(self):
        self.speed += (self.target_speed - self.speed) * self.velocity_factor

    def jump_progress(self, now: float) -> float:
        if self.jump_duration <= 0:
            return 1.0
        return min((now - self.jump_start_time) / self.jump_duration, 1.0)

    def visual_state(self) -> str:
        """State name for the actor view."""
        if self.airborne:
            return "jump"
        return self.gait.value
