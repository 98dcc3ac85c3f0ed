"""
Example running the ITCZ, wind belt and ocean current stages on a virtual continent.
"""

import numpy as np
import matplotlib.pyplot as plt

from py_climsim.config import RESOLUTION_PRESETS, settings
from py_climsim.core import VirtualContinentSource, build_grid, run_simulation
from py_climsim.core.ocean_currents import ImpactKind
from py_climsim.utils import configure_logging


def main():
    configure_logging(settings)

    # Low resolution keeps the agent tracer quick
    preset = RESOLUTION_PRESETS[0]
    grid = build_grid(preset["lat"], preset["lon"], VirtualContinentSource())

    def progress(percent, label, step_id):
        print(f"[{percent:3d}%] {label}")

    result = run_simulation(grid, target_months=[0, 6], on_progress=progress)

    print(f"Circulation cells per hemisphere: {result.cell_count}")
    print(f"Hadley width: {result.hadley_width_deg:.1f} deg")
    print(f"Cell boundaries: {', '.join(f'{b:.1f}' for b in result.wind.cell_boundaries_deg)}")
    print(f"Equatorial current gap: {result.wind.ocean_ec_lat_gap_derived:.1f} deg")
    print(f"ITCZ range: {result.itcz.itcz_lines.min():.1f} to {result.itcz.itcz_lines.max():.1f} deg")

    for stats in result.ocean.phase_stats:
        print(f"Month {stats.month} {stats.phase}: {stats.spawned} spawned, {stats.survivors} survived, "
              f"causes {stats.causes}")
    for diagnostic in result.ocean.diagnostics[:5]:
        print(f"  {diagnostic.kind.value} at ({diagnostic.lat:.1f}, {diagnostic.lon:.1f}): {diagnostic.message}")

    # Visualize January and July
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    extent = (-180, 180, -90, 90)

    for ax, month in zip(axes, (0, 6)):
        ax.imshow(np.where(grid.is_land, 1.0, 0.0), cmap="Greys", extent=extent, alpha=0.4)
        ax.plot(grid.lons, result.itcz.itcz_lines[month], color="red", label="ITCZ")

        for line in result.ocean.streamlines[month]:
            lons = np.array([p.lon for p in line.points])
            lats = np.array([p.lat for p in line.points])
            # Break the path where it crosses the seam
            lons[np.abs(np.diff(lons, prepend=lons[0])) > 180] = np.nan
            ax.plot(lons, lats, linewidth=0.8, color="tab:blue" if line.kind.value == "main" else "tab:green")

        impacts = result.ocean.impacts[month]
        ax.scatter([i.lon for i in impacts if i.kind == ImpactKind.ECC],
                   [i.lat for i in impacts if i.kind == ImpactKind.ECC], marker="x", color="black", s=20)
        ax.set_title(f"Month {month}")
        ax.set_xlim(-180, 180)
        ax.set_ylim(-90, 90)
        ax.legend(loc="lower left")

    plt.tight_layout()
    plt.savefig("ocean_currents_demo.png", dpi=150)
    print("\nVisualization saved to ocean_currents_demo.png")


if __name__ == "__main__":
    main()
