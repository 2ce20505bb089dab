# src/tests/player_unit.py
import math
from src.runner.config import MAX_WALK_SPEED, MAX_RUN_SPEED
from src.runner.player import ActorKinematics, JumpPhase, Gait, jump_offset


def test_jump_arc():
    assert jump_offset(0.0, 100) == 0.0
    assert abs(jump_offset(1.0, 100)) < 1e-9
    assert math.isclose(jump_offset(0.5, 100), -100)
    assert math.isclose(jump_offset(0.5, 100, double=True), -200)
    # Clamped outside [0, 1]
    assert jump_offset(1.7, 100) == jump_offset(1.0, 100)


def test_jump_transitions():
    k = ActorKinematics(x=0, y=0)
    assert k.try_jump(0.0) and k.jump_phase == JumpPhase.SINGLE_JUMP
    assert k.try_jump(0.1) and k.jump_phase == JumpPhase.DOUBLE_JUMP
    assert not k.try_jump(0.2), "no triple jump"
    assert k.jump_start_time == 0.1
    assert k.fire("land") and k.jump_phase == JumpPhase.GROUNDED
    assert not k.fire("land")


def test_falling_is_terminal():
    k = ActorKinematics(x=0, y=0)
    k.try_jump(0.0)
    assert k.fire("fall") and k.falling
    assert not k.try_jump(1.0)
    assert not k.fire("land")


def test_double_tap_runs():
    k = ActorKinematics(x=0, y=0)
    assert k.press_move(0.0) == Gait.WALK and k.target_speed == MAX_WALK_SPEED
    k.release_move()
    assert k.target_speed == 0.0
    assert k.press_move(0.2) == Gait.RUN and k.target_speed == MAX_RUN_SPEED
    # Key repeat while held changes nothing
    assert k.press_move(0.25) == Gait.RUN
    k.release_move()
    assert k.press_move(1.0) == Gait.WALK


def test_speed_eases_towards_target():
    k = ActorKinematics(x=0, y=0, target_speed=10.0)
    k.smooth_speed()
    assert math.isclose(k.speed, 1.0)
    for _ in range(200):
        k.smooth_speed()
    assert abs(k.speed - 10.0) < 1e-3


def test_visual_state():
    k = ActorKinematics(x=0, y=0)
    assert k.visual_state() == "idle"
    k.press_move(0.0)
    assert k.visual_state() == "walk"
    k.try_jump(0.0)
    assert k.visual_state() == "jump"


def main():
    test_jump_arc()
    test_jump_transitions()
    test_falling_is_terminal()
    test_double_tap_runs()
    test_speed_eases_towards_target()
    test_visual_state()
    print("✓ player unit checks passed")


if __name__ == "__main__":
    main()
