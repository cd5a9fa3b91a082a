"""
Basin map for four perturbed gravitating attractors.

Every pixel seeds a damped point mass at rest; the color says which attractor
caught it (red/green/blue/yellow), whether it was still moving when the step
budget ran out (white) or whether it settled far from all of them (black).
"""
import matplotlib.pyplot as plt

from gravbasin import AttractorSet, PlaneSampler, basin_map
from gravbasin.plot import basin_plot, output_path, save_basin_image, show

attractors = AttractorSet.build(seed=2023)
print(attractors.describe())

result = basin_map(
    attractors,
    PlaneSampler(width=600, height=600, zoom=1.5),
    jit=True,
    progress=True,
)

for label, count in result.counts().items():
    print(f"{label.name:<13} {count}")
print(f"elapsed: {result.meta['elapsed_s']:.2f}s")

print("wrote", save_basin_image(result, output_path("figs")))

fig, (ax_full, ax_zoom) = plt.subplots(1, 2, figsize=(12, 6))
basin_plot(result, ax=ax_full, title="zoom 1.5")

# Zoom into the seam between attractors 0 and 1
detail = basin_map(attractors, PlaneSampler(width=400, height=400, zoom=0.4), jit=True)
basin_plot(detail, ax=ax_zoom, title="zoom 0.4")

show()
