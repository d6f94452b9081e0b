"""DataFrame reports over simulation and scenario results."""

from typing import Dict

import pandas as pd

from .simulation import MonteCarloResult


def create_distribution_report(result: MonteCarloResult) -> pd.DataFrame:
    """Create a DataFrame report of per-covenant distributions.

    Args:
        result: A MonteCarloResult

    Returns:
        DataFrame with one row per covenant, sorted by breach probability
    """
    data = []
    for covenant_id, dist in result.distributions.items():
        row = {
            'Covenant': covenant_id,
            'Mean': dist.mean,
            'Std_Dev': dist.std_dev,
            'Min': dist.min,
            'Max': dist.max,
            'Breach_Probability': dist.breach_probability,
        }
        for level, value in dist.percentiles.items():
            row[f'P{level:g}'] = value
        data.append(row)

    df = pd.DataFrame(data)
    if not df.empty:
        df = df.sort_values('Breach_Probability', ascending=False).reset_index(drop=True)
    return df


def create_iteration_frame(result: MonteCarloResult) -> pd.DataFrame:
    """Flatten retained iterations into one row per iteration.

    Columns are the sampled variables, then '<covenant>_ratio' and
    '<covenant>_headroom' per covenant, then the breach count.

    Args:
        result: A MonteCarloResult run with keep_iterations=True

    Returns:
        DataFrame indexed by iteration number
    """
    if result.iterations is None:
        raise ValueError("Result has no iteration records; run with keep_iterations=True")

    rows = []
    for it in result.iterations:
        row = dict(it.variable_values)
        for covenant_id, ratio in it.covenant_ratios.items():
            row[f'{covenant_id}_ratio'] = ratio.as_float()
            row[f'{covenant_id}_headroom'] = it.headroom_values[covenant_id]
        row['breach_count'] = len(it.breached_covenants)
        rows.append(row)

    index = pd.Index([it.iteration for it in result.iterations], name='iteration')
    return pd.DataFrame(rows, index=index)


def create_scenario_report(impact: Dict[str, Dict[str, float]]) -> pd.DataFrame:
    """Create a DataFrame report of a deterministic scenario.

    Args:
        impact: Output of calculate_scenario_impact

    Returns:
        DataFrame with Ratio, Headroom and Breached columns, tightest headroom first
    """
    df = pd.DataFrame([
        {'Covenant': covenant_id, 'Ratio': v['ratio'].as_float(),
         'Headroom': v['headroom']}
        for covenant_id, v in impact.items()
    ], columns=['Covenant', 'Ratio', 'Headroom'])
    df['Breached'] = df['Headroom'] < 0
    return df.sort_values('Headroom').reset_index(drop=True)
