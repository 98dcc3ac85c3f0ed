"""
Agent-based ocean surface current tracer.

Each simulated month runs two phases:
- Phase 1 (ECC): Equatorial Counter-Current agents spawn along the ITCZ and
  drift east until they hit a coast head-on.
- Phase 2 (EC): every ECC impact seeds a north and a south Equatorial Current
  agent that crawls off the coast and flows west towards the ITCZ +/- gap.

Agents are advanced in lock-step, each macro step split into sub-steps.
Surviving paths become streamlines; coast hits become impact markers.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import numpy as np
import structlog

from ..config.params import PhysicsParams
from .grid import MONTHS, PlanetGrid
from .ocean_collision import CollisionField, compute_collision_field

logger = structlog.get_logger()

DEFAULT_MONTHS = (0, 6)


class AgentState(str, Enum):
    ACTIVE = "active"
    CRAWLING = "crawling"
    IMPACT = "impact"
    STUCK = "stuck"
    DEAD = "dead"


TERMINAL_STATES = frozenset({AgentState.IMPACT, AgentState.STUCK, AgentState.DEAD})


class AgentKind(str, Enum):
    ECC = "ECC"
    EC_N = "EC_N"
    EC_S = "EC_S"


class AgentCause(str, Enum):
    """Why an agent left the simulation."""

    COASTAL_IMPACT = "Coastal Impact"
    ARRIVAL = "Arrival (West Coast)"
    MERGED = "Merged/Pruned"
    POLAR_EXIT = "Polar Exit"
    STAGNATION = "Stagnation"
    DEFLECTED = "Deflected too far"
    ZERO_VELOCITY = "Zero Velocity"
    DEGENERATE_GEOMETRY = "Degenerate Geometry"


class StreamlineKind(str, Enum):
    MAIN = "main"
    SPLIT_N = "split_n"
    SPLIT_S = "split_s"


class ImpactKind(str, Enum):
    ECC = "ECC"
    EC = "EC"


class DiagnosticKind(str, Enum):
    ECC_STUCK = "ECC_STUCK"
    EC_INFANT_DEATH = "EC_INFANT_DEATH"


STREAMLINE_KINDS = {
    AgentKind.ECC: StreamlineKind.MAIN,
    AgentKind.EC_N: StreamlineKind.SPLIT_N,
    AgentKind.EC_S: StreamlineKind.SPLIT_S,
}


@dataclass
class StreamlinePoint:
    x: float  # unwrapped column
    y: float  # row
    lat: float
    lon: float  # wrapped to [-180, 180)
    vx: float
    vy: float


@dataclass
class OceanStreamline:
    points: List[StreamlinePoint]
    kind: StreamlineKind
    strength: float
    agent_id: int


@dataclass
class OceanImpact:
    x: float
    y: float
    lat: float
    lon: float
    kind: ImpactKind


@dataclass
class OceanDiagnostic:
    """Non-fatal anomaly record, usually a sign of parameter misconfiguration."""

    kind: DiagnosticKind
    x: float
    y: float
    lat: float
    lon: float
    age: int
    message: str


@dataclass
class Agent:
    """A single current tracer. `index` is dense and assigned at spawn."""

    index: int
    kind: AgentKind
    x: float
    y: float
    vx: float
    vy: float
    strength: float
    state: AgentState = AgentState.ACTIVE
    cause: Optional[AgentCause] = None
    age: int = 0
    stagnation_counter: int = 0
    last_x: float = 0.0
    last_y: float = 0.0
    points: List[StreamlinePoint] = field(default_factory=list)

    def __post_init__(self):
        self.last_x = self.x
        self.last_y = self.y

    @property
    def is_active(self) -> bool:
        return self.state not in TERMINAL_STATES

    @property
    def is_ec(self) -> bool:
        return self.kind != AgentKind.ECC


@dataclass
class AgentSnapshot:
    index: int
    kind: AgentKind
    x: float
    y: float
    vx: float
    vy: float
    state: AgentState
    cause: Optional[AgentCause]


@dataclass
class DebugFrame:
    month: int
    step: int  # continues across phases within a month
    phase: str
    agents: List[AgentSnapshot]


class StepObserver(Protocol):
    """Receives one frame per macro step. Must not mutate the agents."""

    def on_step(self, frame: DebugFrame) -> None:
        ...


class DebugFrameRecorder:
    """Collects the frames of one month."""

    def __init__(self, month: Optional[int] = None):
        self.month = month
        self.frames: List[DebugFrame] = []

    def on_step(self, frame: DebugFrame) -> None:
        if self.month is None or frame.month == self.month:
            self.frames.append(frame)


@dataclass
class OceanDebugData:
    frames: List[DebugFrame]
    collision_field: np.ndarray
    width: int
    height: int
    itcz_line: np.ndarray


@dataclass
class PhaseStats:
    month: int
    phase: str
    spawned: int
    survivors: int
    causes: Dict[str, int] = field(default_factory=dict)


@dataclass
class OceanCurrentsResult:
    streamlines: List[List[OceanStreamline]]  # indexed by month
    impacts: List[List[OceanImpact]]  # indexed by month
    diagnostics: List[OceanDiagnostic]
    phase_stats: List[PhaseStats]
    debug: Optional[OceanDebugData] = None


class FlowPruner:
    """
    Coarse flow-direction memory used to drop redundant parallel paths.

    The first agent to visit a cell records its direction; a later visit by
    another agent with a nearly identical direction reports a duplicate.
    """

    def __init__(self, rows: int, cols: int, similarity: float):
        self.rows = rows
        self.cols = cols
        self.similarity = similarity
        self.flow: Dict[Tuple[int, int], Tuple[float, float, int]] = {}

    def check(self, owner: int, x: float, y: float, vx: float, vy: float) -> bool:
        col = math.floor(x + 0.5) % self.cols
        row = min(max(math.floor(y + 0.5), 0), self.rows - 1)
        key = (row, col)

        recorded = self.flow.get(key)
        if recorded is None:
            self.flow[key] = (vx, vy, owner)
            return False

        ex, ey, first_owner = recorded
        if first_owner == owner:
            return False

        sim = (vx * ex + vy * ey) / (math.hypot(vx, vy) * math.hypot(ex, ey) + 1e-4)
        return sim > self.similarity


class OceanCurrentEngine:
    """Runs the two-phase current simulation over a collision field."""

    def __init__(
        self,
        grid: PlanetGrid,
        collision: CollisionField,
        physics: Optional[PhysicsParams] = None,
        ec_lat_gap: Optional[float] = None,
        observers: Sequence[StepObserver] = (),
    ):
        self.grid = grid
        self.collision = collision
        self.physics = physics or PhysicsParams()
        self.ec_lat_gap = self.physics.ocean_ec_lat_gap if ec_lat_gap is None else ec_lat_gap
        self.observers = list(observers)

        phys = self.physics
        self.dt = phys.ocean_macro_dt / phys.ocean_sub_steps
        self.max_speed = phys.ocean_base_speed * phys.ocean_max_speed_multiplier
        self.diagnostics: List[OceanDiagnostic] = []

        # Per-month state
        self.itcz: List[float] = []
        self.pruner: Optional[FlowPruner] = None
        self.impacts: List[OceanImpact] = []
        self.spawn_points: List[Tuple[float, float]] = []
        self.ec_arrivals = 0
        self.next_index = 0

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def _itcz_at(self, x: float) -> float:
        return self.itcz[math.floor(x) % self.grid.cols]

    def _point(self, agent: Agent) -> StreamlinePoint:
        return StreamlinePoint(
            x=agent.x,
            y=agent.y,
            lat=self.grid.lat_from_row(agent.y),
            lon=self.grid.lon_from_col(agent.x),
            vx=agent.vx,
            vy=agent.vy,
        )

    def _clamp_speed(self, vx: float, vy: float) -> Tuple[float, float]:
        speed = math.hypot(vx, vy)
        if speed > self.max_speed:
            return vx / speed * self.max_speed, vy / speed * self.max_speed
        return vx, vy

    def _bisect(self, x0: float, y0: float, x1: float, y1: float) -> Tuple[float, float]:
        """Refine a segment's ocean-to-wall crossing; the returned point is inside the wall."""
        lo, hi = 0.0, 1.0
        for _ in range(self.physics.ocean_bisection_iterations):
            mid = (lo + hi) * 0.5
            if self.collision.environment(x0 + (x1 - x0) * mid, y0 + (y1 - y0) * mid).dist > 0:
                hi = mid
            else:
                lo = mid
        return x0 + (x1 - x0) * hi, y0 + (y1 - y0) * hi

    def _recover(self, agent: Agent, dist: float, gx: float, gy: float) -> bool:
        """
        Push an agent that is already inside the wall back towards the ocean.

        Returns:
            False when the gradient is degenerate and the agent cannot escape
        """
        phys = self.physics
        grad_len = math.hypot(gx, gy)
        if grad_len <= phys.ocean_min_gradient:
            return False

        push = min(dist / grad_len + phys.ocean_recovery_push, phys.ocean_max_recovery_push)
        agent.x -= gx / grad_len * push
        agent.y -= gy / grad_len * push
        return True

    def find_safe_spawn_x(self, start_x: float, y: float) -> float:
        """Walk west from an impact until the field reads open ocean."""
        phys = self.physics
        x = start_x
        for _ in range(phys.ocean_safe_spawn_search):
            if self.collision.environment(x, y).dist < -phys.ocean_safe_spawn_depth:
                return x - phys.ocean_spawn_offset
            x -= 1.0
        return start_x - (phys.ocean_spawn_offset + phys.ocean_safe_spawn_fallback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _spawn(self, kind: AgentKind, x: float, y: float, vx: float, vy: float) -> Agent:
        agent = Agent(index=self.next_index, kind=kind, x=x, y=y, vx=vx, vy=vy,
                      strength=self.physics.ocean_agent_strength)
        agent.points.append(self._point(agent))
        self.next_index += 1
        return agent

    def _diagnose(self, agent: Agent, kind: DiagnosticKind, message: str):
        logger.debug("Ocean agent anomaly", kind=kind.value, agent=agent.index, age=agent.age, message=message)
        self.diagnostics.append(OceanDiagnostic(
            kind=kind,
            x=agent.x,
            y=agent.y,
            lat=self.grid.lat_from_row(agent.y),
            lon=self.grid.lon_from_col(agent.x),
            age=agent.age,
            message=message,
        ))

    def _terminate(self, agent: Agent, state: AgentState, cause: AgentCause):
        phys = self.physics
        agent.state = state
        agent.cause = cause

        if agent.kind == AgentKind.ECC:
            if cause == AgentCause.STAGNATION:
                self._diagnose(agent, DiagnosticKind.ECC_STUCK, "ECC Stagnated")
        elif cause == AgentCause.ARRIVAL:
            if agent.age < phys.ocean_infant_age:
                self._diagnose(agent, DiagnosticKind.EC_INFANT_DEATH, "Early Arrival (Check Spawn/Gap)")
        elif agent.age < phys.ocean_spawn_death_age:
            self._diagnose(agent, DiagnosticKind.EC_INFANT_DEATH, "EC Died on Spawn")

    def _target_lat(self, agent: Agent) -> float:
        itcz_lat = self._itcz_at(agent.x)
        if agent.kind == AgentKind.EC_N:
            return itcz_lat + self.ec_lat_gap
        if agent.kind == AgentKind.EC_S:
            return itcz_lat - self.ec_lat_gap
        return itcz_lat

    def _advance(self, agent: Agent, integrate: Callable[[Agent], None], stagnation_limit: int,
                 polar_exit: float):
        """One macro step: stagnation, pruning, sub-step integration, bookkeeping."""
        phys = self.physics

        moved = abs(agent.x - agent.last_x) + abs(agent.y - agent.last_y)
        if moved < phys.ocean_stagnation_factor * phys.ocean_macro_dt:
            agent.stagnation_counter += 1
        else:
            agent.stagnation_counter = 0
        agent.last_x, agent.last_y = agent.x, agent.y

        if agent.stagnation_counter > stagnation_limit:
            self._terminate(agent, AgentState.STUCK, AgentCause.STAGNATION)

        if agent.is_active and len(agent.points) > phys.ocean_prune_min_points:
            if self.pruner.check(agent.index, agent.x, agent.y, agent.vx, agent.vy):
                self._terminate(agent, AgentState.DEAD, AgentCause.MERGED)

        if agent.is_active:
            for _ in range(phys.ocean_sub_steps):
                integrate(agent)
                if not agent.is_active:
                    break
                if abs(self.grid.lat_from_row(agent.y)) > polar_exit:
                    self._terminate(agent, AgentState.DEAD, AgentCause.POLAR_EXIT)
                    break

        if agent.state == AgentState.ACTIVE:
            allowed = phys.ocean_deflect_lat + (self.ec_lat_gap if agent.is_ec else 0.0)
            if abs(self.grid.lat_from_row(agent.y) - self._itcz_at(agent.x)) > allowed:
                self._terminate(agent, AgentState.DEAD, AgentCause.DEFLECTED)
            elif math.hypot(agent.vx, agent.vy) < phys.ocean_min_speed:
                self._terminate(agent, AgentState.DEAD, AgentCause.ZERO_VELOCITY)

        agent.age += 1
        if agent.is_active:
            agent.points.append(self._point(agent))

    # ------------------------------------------------------------------
    # Phase 1: Equatorial Counter-Current
    # ------------------------------------------------------------------

    def spawn_ecc_agents(self) -> List[Agent]:
        """ECC agents along the ITCZ in deep water, behind walls or at the gap-fill interval."""
        grid = self.grid
        phys = self.physics
        interval = max(1, grid.cols // phys.ocean_gap_fill_divisor)

        agents = []
        for c in range(grid.cols):
            r = grid.row_from_lat(self.itcz[c])
            if r < 0 or r >= grid.rows:
                continue
            if self.collision.environment(c, r).dist > -phys.ocean_spawn_depth:
                continue

            west_is_wall = self.collision.is_wall(c - 1, math.floor(r + 0.5))
            if west_is_wall or c % interval == 0:
                agents.append(self._spawn(AgentKind.ECC, float(c), r, phys.ocean_base_speed, 0.0))
        return agents

    def integrate_ecc(self, agent: Agent):
        phys = self.physics
        env = self.collision

        target_y = self.grid.row_from_lat(self._itcz_at(agent.x))
        nvx = agent.vx + phys.ocean_base_speed * phys.ocean_ecc_drive_factor
        nvy = agent.vy + (target_y - agent.y) * phys.ocean_pattern_force
        nvx, nvy = self._clamp_speed(nvx, nvy)

        next_x = agent.x + nvx * self.dt
        next_y = agent.y + nvy * self.dt
        here = env.environment(agent.x, agent.y)
        ahead = env.environment(next_x, next_y)

        if here.dist <= 0 < ahead.dist:
            hit_x, hit_y = self._bisect(agent.x, agent.y, next_x, next_y)
            nx, ny, _ = env.normal(hit_x, hit_y)
            v_dot_n = nvx * nx + nvy * ny
            head_on = nvx > 0 and nx > phys.ocean_head_on_normal_x

            if head_on and v_dot_n > phys.ocean_impact_threshold:
                self.impacts.append(OceanImpact(
                    x=hit_x, y=hit_y, lat=self.grid.lat_from_row(hit_y),
                    lon=self.grid.lon_from_col(hit_x), kind=ImpactKind.ECC,
                ))
                self.spawn_points.append((self.find_safe_spawn_x(hit_x, hit_y), hit_y))
                agent.vx, agent.vy = nvx, nvy
                self._terminate(agent, AgentState.IMPACT, AgentCause.COASTAL_IMPACT)
                return

            # Glancing contact: keep the tangential velocity
            nvx -= v_dot_n * nx
            nvy -= v_dot_n * ny
            agent.x = hit_x - nx * phys.ocean_slide_epsilon
            agent.y = hit_y - ny * phys.ocean_slide_epsilon
        elif here.dist > 0:
            if not self._recover(agent, here.dist, here.gx, here.gy):
                self._terminate(agent, AgentState.STUCK, AgentCause.DEGENERATE_GEOMETRY)
                return
        else:
            agent.x, agent.y = next_x, next_y

        agent.vx, agent.vy = nvx, nvy

    # ------------------------------------------------------------------
    # Phase 2: Equatorial Current
    # ------------------------------------------------------------------

    def spawn_ec_agents(self) -> List[Agent]:
        """A north and a south agent per ECC impact, moving poleward only."""
        speed = self.physics.ocean_base_speed * self.physics.ocean_spawn_speed_multiplier
        agents = []
        for x, y in self.spawn_points:
            agents.append(self._spawn(AgentKind.EC_N, x, y, 0.0, -speed))
            agents.append(self._spawn(AgentKind.EC_S, x, y, 0.0, speed))
        return agents

    def _ec_acceleration(self, agent: Agent) -> Tuple[float, float]:
        phys = self.physics
        grid = self.grid

        target_lat = self._target_lat(agent)
        target_y = grid.row_from_lat(target_lat)
        here = self.collision.environment(agent.x, agent.y)

        grad_len = math.hypot(here.gx, here.gy)
        nx, ny = (here.gx / grad_len, here.gy / grad_len) if grad_len > 0 else (0.0, 0.0)

        near_coast = here.dist > -phys.ocean_coast_sense_dist
        far_from_target = abs(grid.lat_from_row(agent.y) - target_lat) > phys.ocean_crawl_lat_threshold
        # Normalised, so the threshold is an angle from east
        land_eastward = nx > phys.ocean_crawl_trap_normal_x

        if near_coast and land_eastward and far_from_target:
            agent.state = AgentState.CRAWLING
            if grad_len <= phys.ocean_min_gradient:
                return 0.0, (target_y - agent.y) * phys.ocean_crawl_fallback_gain

            # Coast tangent whose y component heads for the target row
            toward = 1.0 if target_y - agent.y > 0 else -1.0
            tx, ty = -ny, nx
            if ty * toward < -ty * toward:
                tx, ty = ny, -nx

            crawl_speed = phys.ocean_base_speed * phys.ocean_crawl_speed_multiplier
            ax = (tx * crawl_speed - agent.vx) * phys.ocean_crawl_accel - nx * phys.ocean_crawl_wall_push
            ay = (ty * crawl_speed - agent.vy) * phys.ocean_crawl_accel - ny * phys.ocean_crawl_wall_push
            return ax, ay

        agent.state = AgentState.ACTIVE
        ax = (-phys.ocean_base_speed - agent.vx) * phys.ocean_inertia_x
        ay = (target_y - agent.y) * phys.ocean_ec_pattern_force - agent.vy * phys.ocean_ec_damping

        if near_coast and grad_len > phys.ocean_min_gradient:
            repulse = phys.ocean_repulse_strength * (1.0 - here.dist / -phys.ocean_coast_sense_dist)
            ax -= nx * repulse
            ay -= ny * repulse
        return ax, ay

    def _record_arrival(self, x: float, y: float):
        if self.ec_arrivals % self.physics.ocean_ec_impact_stride == 0:
            self.impacts.append(OceanImpact(
                x=x, y=y, lat=self.grid.lat_from_row(y),
                lon=self.grid.lon_from_col(x), kind=ImpactKind.EC,
            ))
        self.ec_arrivals += 1

    def integrate_ec(self, agent: Agent):
        phys = self.physics
        env = self.collision

        ax, ay = self._ec_acceleration(agent)
        nvx, nvy = self._clamp_speed(agent.vx + ax, agent.vy + ay)

        next_x = agent.x + nvx * self.dt
        next_y = agent.y + nvy * self.dt
        here = env.environment(agent.x, agent.y)
        ahead = env.environment(next_x, next_y)

        if here.dist <= 0 < ahead.dist:
            hit_x, hit_y = self._bisect(agent.x, agent.y, next_x, next_y)
            nx, ny, _ = env.normal(hit_x, hit_y)
            v_dot_n = nvx * nx + nvy * ny
            arrival = nvx < 0 and nx < phys.ocean_arrival_normal_x

            if arrival and v_dot_n > phys.ocean_impact_threshold:
                self._record_arrival(hit_x, hit_y)
                agent.vx, agent.vy = nvx, nvy
                self._terminate(agent, AgentState.DEAD, AgentCause.ARRIVAL)
                return

            nvx = (nvx - v_dot_n * nx) * phys.ocean_slide_friction
            nvy = (nvy - v_dot_n * ny) * phys.ocean_slide_friction
            agent.x = hit_x - nx * phys.ocean_push_out
            agent.y = hit_y - ny * phys.ocean_push_out
        elif here.dist > 0:
            if not self._recover(agent, here.dist, here.gx, here.gy):
                self._terminate(agent, AgentState.STUCK, AgentCause.DEGENERATE_GEOMETRY)
                return
        else:
            agent.x, agent.y = next_x, next_y

        agent.vx, agent.vy = nvx, nvy

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def _notify(self, month: int, step: int, phase: str, agents: Iterable[Agent]):
        if not self.observers:
            return
        frame = DebugFrame(
            month=month,
            step=step,
            phase=phase,
            agents=[
                AgentSnapshot(index=a.index, kind=a.kind, x=a.x, y=a.y, vx=a.vx, vy=a.vy,
                              state=a.state, cause=a.cause)
                for a in agents
            ],
        )
        for observer in self.observers:
            observer.on_step(frame)

    def _run_phase(self, month: int, phase: str, agents: List[Agent], integrate: Callable[[Agent], None],
                   stagnation_limit: int, polar_exit: float, first_step: int) -> int:
        """Advance a phase until every agent is terminal or the step cap is hit."""
        steps = 0
        for step in range(self.physics.ocean_streamline_steps):
            if not any(agent.is_active for agent in agents):
                break
            for agent in agents:
                if agent.is_active:
                    self._advance(agent, integrate, stagnation_limit, polar_exit)
            steps += 1
            self._notify(month, first_step + step, phase, agents)
        return steps

    def _phase_stats(self, month: int, phase: str, agents: List[Agent]) -> PhaseStats:
        causes: Dict[str, int] = {}
        for agent in agents:
            if agent.cause is not None:
                causes[agent.cause.value] = causes.get(agent.cause.value, 0) + 1
        return PhaseStats(
            month=month,
            phase=phase,
            spawned=len(agents),
            survivors=sum(1 for agent in agents if agent.is_active),
            causes=causes,
        )

    def _streamlines(self, agents: List[Agent]) -> List[OceanStreamline]:
        return [
            OceanStreamline(points=agent.points, kind=STREAMLINE_KINDS[agent.kind],
                            strength=agent.strength, agent_id=agent.index)
            for agent in agents
            if len(agent.points) >= self.physics.ocean_min_streamline_points
        ]

    def run_month(self, month: int, itcz_line: Sequence[float]
                  ) -> Tuple[List[OceanStreamline], List[OceanImpact], List[PhaseStats]]:
        """
        Simulate both phases for one month.

        Args:
            month: Month index (0-11)
            itcz_line: ITCZ latitude per column for this month

        Returns:
            Tuple of (streamlines, impacts, per-phase statistics)
        """
        phys = self.physics
        grid = self.grid

        self.itcz = [float(lat) for lat in itcz_line]
        self.pruner = FlowPruner(grid.rows, grid.cols, phys.ocean_prune_similarity)
        self.impacts = []
        self.spawn_points = []
        self.ec_arrivals = 0
        self.next_index = 0

        ecc_agents = self.spawn_ecc_agents()
        logger.info("Phase 1: counter-current", month=month, agents=len(ecc_agents))
        ecc_steps = self._run_phase(month, "ECC", ecc_agents, self.integrate_ecc,
                                    phys.ocean_ecc_stagnation_steps, phys.ocean_ecc_polar_exit, 0)

        ec_agents = self.spawn_ec_agents()
        logger.info("Phase 2: equatorial current", month=month, agents=len(ec_agents),
                    impacts=len(self.spawn_points))
        self._run_phase(month, "EC", ec_agents, self.integrate_ec,
                        phys.ocean_ec_stagnation_steps, phys.ocean_ec_polar_exit, ecc_steps)

        streamlines = self._streamlines(ecc_agents) + self._streamlines(ec_agents)
        stats = [self._phase_stats(month, "ECC", ecc_agents), self._phase_stats(month, "EC", ec_agents)]

        logger.info("Month simulated", month=month, streamlines=len(streamlines),
                    impacts=len(self.impacts), ecc_causes=stats[0].causes, ec_causes=stats[1].causes)
        return streamlines, self.impacts, stats


def _check_month(month: int):
    if not 0 <= month < MONTHS:
        raise ValueError(f"Month must be in 0..{MONTHS - 1}, got {month}")


def compute_ocean_currents(
    grid: PlanetGrid,
    itcz_lines,
    physics: Optional[PhysicsParams] = None,
    target_months: Optional[Sequence[int]] = None,
    debug_month: Optional[int] = None,
    ec_lat_gap: Optional[float] = None,
    observer: Optional[StepObserver] = None,
) -> OceanCurrentsResult:
    """
    Trace ocean surface currents for the requested months.

    Args:
        grid: PlanetGrid with dist_coast populated; its collision mask is written here
        itcz_lines: (12, cols) ITCZ latitudes
        physics: Tuning constants
        target_months: Months to simulate, January and July by default
        debug_month: Simulate only this month and record its per-step frames
        ec_lat_gap: Override of the ITCZ-to-EC latitude gap
        observer: Optional per-step frame sink

    Returns:
        OceanCurrentsResult with 12 streamline and impact lists (empty for
        months not simulated)
    """
    physics = physics or PhysicsParams()

    itcz_lines = np.asarray(itcz_lines, dtype=np.float64)
    if itcz_lines.shape != (MONTHS, grid.cols):
        raise ValueError(f"itcz_lines must have shape {(MONTHS, grid.cols)}, got {itcz_lines.shape}")

    if debug_month is not None:
        _check_month(debug_month)
        months = [debug_month]
    else:
        months = list(target_months) if target_months is not None else list(DEFAULT_MONTHS)
        for month in months:
            _check_month(month)

    logger.info("Simulating ocean currents", months=months, ec_lat_gap=ec_lat_gap)

    collision = compute_collision_field(grid, physics)

    observers: List[StepObserver] = []
    recorder = None
    if debug_month is not None:
        recorder = DebugFrameRecorder(debug_month)
        observers.append(recorder)
    if observer is not None:
        observers.append(observer)

    engine = OceanCurrentEngine(grid, collision, physics, ec_lat_gap, observers)

    streamlines: List[List[OceanStreamline]] = [[] for _ in range(MONTHS)]
    impacts: List[List[OceanImpact]] = [[] for _ in range(MONTHS)]
    phase_stats: List[PhaseStats] = []

    for month in months:
        month_lines, month_impacts, stats = engine.run_month(month, itcz_lines[month])
        streamlines[month] = month_lines
        impacts[month] = month_impacts
        phase_stats.extend(stats)

    debug = None
    if recorder is not None:
        debug = OceanDebugData(
            frames=recorder.frames,
            collision_field=collision.values,
            width=grid.cols,
            height=grid.rows,
            itcz_line=itcz_lines[debug_month].copy(),
        )

    logger.info("Ocean currents complete", diagnostics=len(engine.diagnostics),
                streamlines=sum(len(lines) for lines in streamlines))

    return OceanCurrentsResult(
        streamlines=streamlines,
        impacts=impacts,
        diagnostics=engine.diagnostics,
        phase_stats=phase_stats,
        debug=debug,
    )
