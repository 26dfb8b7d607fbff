"""
ABC / Pareto Classification
Ranks SKUs by volume and grades them by cumulative share of total volume.
"""

import pandas as pd

from business_rules import PARETO_RULES

PARETO_COLUMNS = ['sku', 'total_volume', 'cumulative_percent', 'grade', 'share']


def aggregate_sku_volumes(observations_df: pd.DataFrame, category: str = 'All') -> pd.DataFrame:
    """
    Total quantity per SKU, optionally restricted to one category.

    SKUs appear in order of first occurrence.

    Returns:
        pd.DataFrame: 'sku' and 'total_volume'
    """
    if observations_df.empty:
        return pd.DataFrame(columns=['sku', 'total_volume'])

    df = observations_df
    if category and category != 'All':
        df = df[df['category'] == category]

    volumes = df.groupby('sku', sort=False, as_index=False)['quantity'].sum()
    return volumes.rename(columns={'quantity': 'total_volume'})


def get_grade(cumulative_percent: float) -> str:
    """A up to 80% cumulative share (inclusive), B up to 95% (inclusive), C beyond"""
    if cumulative_percent <= PARETO_RULES['a_threshold']:
        return 'A'
    if cumulative_percent <= PARETO_RULES['b_threshold']:
        return 'B'
    return 'C'


def run_pareto_analysis(sku_volumes_df: pd.DataFrame) -> pd.DataFrame:
    """
    Sort SKUs by descending volume and assign ABC grades.

    Ties keep their input order. The input frame is not modified.

    Args:
        sku_volumes_df: DataFrame with 'sku' and 'total_volume'

    Returns:
        pd.DataFrame: PARETO_COLUMNS in descending volume order
    """
    if sku_volumes_df.empty:
        return pd.DataFrame(columns=PARETO_COLUMNS)

    ranked = sku_volumes_df.sort_values('total_volume', ascending=False, kind='stable').reset_index(drop=True)
    total = ranked['total_volume'].sum() or 1

    ranked['cumulative_percent'] = ranked['total_volume'].cumsum() * 100 / total
    ranked['grade'] = ranked['cumulative_percent'].apply(get_grade)
    ranked['share'] = ranked['total_volume'] * 100 / total
    return ranked[PARETO_COLUMNS]


def get_pareto_summary(pareto_df: pd.DataFrame, top_n: int = 3) -> dict:
    """
    Count SKUs and volume per grade and list the leading A-class SKUs.

    Returns:
        dict: {'grades': {grade: {'sku_count', 'volume', 'share'}}, 'top_a_skus': [...]}
    """
    grades = {}
    for grade in ['A', 'B', 'C']:
        subset = pareto_df[pareto_df['grade'] == grade] if not pareto_df.empty else pareto_df
        grades[grade] = {
            'sku_count': int(len(subset)),
            'volume': float(subset['total_volume'].sum()) if not subset.empty else 0.0,
            'share': float(subset['share'].sum()) if not subset.empty else 0.0
        }

    top_a = []
    if not pareto_df.empty:
        top_a = pareto_df.loc[pareto_df['grade'] == 'A', 'sku'].head(top_n).tolist()

    return {'grades': grades, 'top_a_skus': top_a}
