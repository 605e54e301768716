import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from fuzzy_engine.fuzzy_set import FuzzySet, Universe

main_log = logging.getLogger("main")


def plot_universe(universe: Universe, result: FuzzySet = None, crisp: float = None,
                  save=False, output_dir="plots", show=False):
    """
    Plot every membership function of a universe over its domain.
    Optionally overlay an aggregated rule output as red dots and the crisp
    result as a vertical line.
    Args:
        universe (Universe): Universe to draw; sampled at its domain points.
        result (FuzzySet): Aggregated output set to overlay (optional)
        crisp (float): Defuzzified value to mark (optional)
        save (bool): Whether to save the plot as a PNG
        output_dir (str): Directory to save the plot
        show (bool): Whether to open an interactive window
    Returns:
        matplotlib.figure.Figure: The figure, for further styling or tests.
    """
    if not universe.domain:
        raise ValueError(f"Universe '{universe.name}' has no domain to plot over")

    xs = np.asarray(universe.domain, dtype=float)
    curves = {name: [] for name in universe.set_names()}
    for x in xs:
        for name, degree in universe.memberships_at(float(x)).items():
            curves[name].append(degree)

    fig, ax = plt.subplots(figsize=(8, 4))
    for label, ys in curves.items():
        ax.plot(xs, ys, label=label)
        ax.fill_between(xs, ys, alpha=0.1)

    # Overlay aggregate if given
    if result is not None and len(result) > 0:
        x, y = zip(*result.cached_items())
        ax.scatter(
            x,
            y,
            color="red",
            s=20,
            marker="o",
            edgecolors="black",
            linewidths=0.6,
            label=result.name,
            zorder=10,
        )
    if crisp is not None:
        ax.axvline(crisp, color="black", linestyle="--", label=f"crisp = {crisp:.3f}")

    ax.set_title(f"Membership Functions – {universe.name}")
    ax.set_xlabel(universe.name)
    ax.set_ylabel("Membership Degree")
    ax.grid(True)
    ax.legend()
    fig.tight_layout()

    if save:
        os.makedirs(output_dir, exist_ok=True)
        filename = os.path.join(output_dir, f"{universe.name.lower()}_membership_functions.png")
        fig.savefig(filename)
        main_log.info("Saved plot to: %s", filename)

    if show:
        plt.show()
    return fig
