import os

from querysweep.kinds import KIND_SPECS
from querysweep.queries import build_queries


REPORT_MD = """# Query Sweep Report

| **Server** | **Words** | **Samples per query** |
|------------|-----------|-----------------------|
| `{server}` | {nwords}  | {samples}             |

Dictionary: `{dictionary}`

{sections}"""

SECTION_MD = """## {label}

| ![{kind}]({plot}) |
|:--:|
| *Index Query Word Length vs {label} ({unit}), n={samples}.* |

X range: {min_x:g} .. {max_x:g} chars, Y range: {min_y:g} .. {max_y:g} {unit}

| **Step** | **Query** | **Length** | **{label} ({unit})** |
|----------|-----------|------------|----------------------|
{rows}
{skipped}
"""


def _section(result, plot_path, report_dir):
    spec = KIND_SPECS[result.case.kind]
    rows = "\n".join(
        f"| {i} | `{q}` | {x:g} | {y:g} |"
        for i, q, x, y in _rows(result)
    )

    if result.skipped:
        skipped = "Skipped steps:\n\n" + "\n".join(
            f"- #{s.step} `{s.query}`: {s.reason}" for s in result.skipped
        ) + "\n"
    else:
        skipped = ""

    if len(result.samples) > 0:
        bounds = result.bounds._asdict()
    else:
        bounds = dict(min_x=0, max_x=0, min_y=0, max_y=0)

    if plot_path is None:
        plot = "(not rendered)"
    else:
        plot = os.path.relpath(plot_path, report_dir)

    return SECTION_MD.format(
        label=spec.label,
        unit=spec.unit,
        kind=result.case.kind.value,
        plot=plot,
        samples=result.sample_count,
        rows=rows,
        skipped=skipped,
        **bounds,
    )


def _rows(result):
    skipped_steps = {s.step for s in result.skipped}
    queries = build_queries(result.case.dictionary)
    steps = [i for i in range(len(queries)) if i not in skipped_steps]
    for i, sample in zip(steps, result.samples):
        yield i, queries[i], float(sample.x), float(sample.y)


def generate_report(results, plots, report_path):
    """Write a markdown summary of `results`; `plots` maps kind to chart path."""
    if len(results) == 0:
        raise ValueError("no sweep results to report")

    case = results[0].case
    report_dir = os.path.dirname(os.path.abspath(report_path))
    sections = "\n".join(
        _section(r, plots.get(r.case.kind), report_dir) for r in results
    )
    with open(report_path, "w") as f:
        f.write(
            REPORT_MD.format(
                server=f"{case.server_addr}:{case.port}",
                nwords=len(case.dictionary),
                samples=results[0].sample_count,
                dictionary=" ".join(case.dictionary),
                sections=sections,
            )
        )
    return report_path
