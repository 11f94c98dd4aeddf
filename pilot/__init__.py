"""Flight software package - scripted autopilots for the maneuver levels.

The simulation (maneuver/) provides the "plant": orbit, fuel, and mission
logic. The autopilots here only read telemetry and issue the same commands
a player would.

    Simulation loop:
        telemetry = engine.telemetry()    # "Sensors"
        cmd = autopilot.compute(telemetry)
        execute(engine, cmd)
        engine.step()

Example:
    >>> from maneuver import ManeuverEngine, get_level
    >>> from pilot import RaisingAutopilot, fly
    >>>
    >>> config = get_level("orbit_raising")
    >>> final = fly(ManeuverEngine(config), RaisingAutopilot.from_level(config))
    >>> final.status.value
    'success'
"""

from pilot.guidance import (
    AutopilotPhase,
    EscapeAutopilot,
    InjectionAutopilot,
    PilotCommand,
    RaisingAutopilot,
    execute,
    fly,
    plan_burns,
)

AUTOPILOTS = {
    "orbit_injection": InjectionAutopilot,
    "orbit_raising": RaisingAutopilot,
    "trans_planetary_injection": EscapeAutopilot,
}

__all__ = [
    "AUTOPILOTS",
    "AutopilotPhase",
    "PilotCommand",
    "InjectionAutopilot",
    "RaisingAutopilot",
    "EscapeAutopilot",
    "execute",
    "fly",
    "plan_burns",
]
