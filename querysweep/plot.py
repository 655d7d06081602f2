import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt

from querysweep.errors import RenderError
from querysweep.kinds import KIND_SPECS


logger = logging.getLogger(__name__)

# Written by legacy single-test mode
OUT_FILE = "out.png"

CANVAS_PX = (640, 480)
DPI = 100
MARGIN_PX = 10
TITLE_SIZE = 16
FONT_SIZE = 10
X_LABEL = "Query Length (characters)"


def chart_title(label):
    return f"Index Query Word Length vs {label}"


def _widen(lo, hi):
    lo, hi = float(lo), float(hi)
    if lo == hi:
        return lo - 0.5, hi + 0.5
    return lo, hi


def render(series, bounds, x_label, y_label, series_label, out_path, title=None):
    """Draw `series` as a red line chart on a 640x480 canvas saved to `out_path`."""
    if len(series) == 0:
        raise RenderError(f"nothing to plot for '{out_path}'")

    xs = [float(x) for x, _ in series]
    ys = [float(y) for _, y in series]

    fig = plt.figure(figsize=(CANVAS_PX[0] / DPI, CANVAS_PX[1] / DPI), dpi=DPI)
    try:
        fig.patch.set_facecolor("white")
        plt.rc("font", size=FONT_SIZE)
        ax = fig.add_subplot(1, 1, 1)
        ax.plot(xs, ys, color="red", linestyle="-", label=series_label)
        ax.set_xlim(*_widen(bounds.min_x, bounds.max_x))
        ax.set_ylim(*_widen(bounds.min_y, bounds.max_y))
        ax.set_xlabel(x_label)
        ax.set_ylabel(y_label)
        ax.set_title(title or chart_title(y_label), fontsize=TITLE_SIZE)
        ax.grid(True)
        ax.legend(facecolor="white", framealpha=0.8, edgecolor="black")

        # tight_layout pads in units of the font size, margins are in pixels
        fig.tight_layout(pad=MARGIN_PX * 72 / DPI / FONT_SIZE)
        fig.savefig(out_path, dpi=DPI, facecolor="white")
    except (OSError, ValueError) as e:
        raise RenderError(f"cannot render chart to '{out_path}': {e}") from e
    finally:
        plt.close(fig)

    logger.info("Graph saved as: %s", out_path)
    return out_path


def render_result(result, out_path=None):
    """Render a finished sweep with its kind's labels and legend."""
    spec = KIND_SPECS[result.case.kind]
    if len(result.samples) == 0:
        raise RenderError(
            f"{result.case.kind.value} sweep produced no samples to plot"
        )
    return render(
        result.samples,
        result.bounds,
        X_LABEL,
        f"{spec.label} ({spec.unit})",
        f"{spec.label} ({spec.unit}) n={result.sample_count}",
        out_path or result.case.output,
        title=chart_title(spec.label),
    )
