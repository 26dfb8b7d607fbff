"""
Sample dataset used when no files have been uploaded.
Monthly demand for a handful of SKUs with trend, seasonality and noise.
"""

import numpy as np
import pandas as pd

SAMPLE_SKUS = ['SKU-101', 'SKU-102', 'SKU-205', 'SKU-309', 'SKU-440']
SAMPLE_CATEGORIES = ['Electronics', 'Automotive', 'Consumer Goods', 'Industrial']
SAMPLE_START = '2021-01-01'
SAMPLE_END = '2024-05-01'


def generate_sample_data(seed: int = 42) -> pd.DataFrame:
    """
    Generate monthly sales observations for SAMPLE_SKUS.

    Each SKU gets a random base level and trend; demand peaks seasonally and
    lifts in the last quarter.
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(SAMPLE_START, SAMPLE_END, freq='MS')
    rows = []

    for sku in SAMPLE_SKUS:
        category = SAMPLE_CATEGORIES[rng.integers(len(SAMPLE_CATEGORIES))]
        base_quantity = 100 + rng.random() * 500
        trend = 0.5 + rng.random() * 1.5

        for months_since_start, date in enumerate(dates):
            month = date.month - 1
            seasonal_factor = 1 + np.sin((month / 12) * np.pi * 2) * 0.2 + (0.3 if month > 9 else 0)
            noise = (rng.random() - 0.5) * 50
            quantity = max(0, int(np.floor((base_quantity + months_since_start * trend) * seasonal_factor + noise + 0.5)))
            rows.append({'date': date, 'sku': sku, 'category': category, 'quantity': quantity})

    return pd.DataFrame(rows, columns=['date', 'sku', 'category', 'quantity'])


def generate_sample_attributes(seed: int = 42) -> pd.DataFrame:
    """Per-SKU lead time, cost and price (price = 1.5 x cost) at a 95% service level"""
    categories = generate_sample_data(seed).groupby('sku')['category'].first()
    rng = np.random.default_rng(seed + 1)
    rows = []
    for sku in SAMPLE_SKUS:
        unit_cost = 10 + rng.random() * 200
        rows.append({
            'sku': sku,
            'category': categories[sku],
            'lead_time_days': int(15 + rng.integers(45)),
            'unit_cost': unit_cost,
            'selling_price': unit_cost * 1.5,
            'service_level': 0.95
        })
    return pd.DataFrame(rows)


def generate_sample_inventory(seed: int = 42) -> pd.DataFrame:
    """On-hand stock between 500 and 2,499 units per SKU"""
    rng = np.random.default_rng(seed + 2)
    return pd.DataFrame({
        'sku': SAMPLE_SKUS,
        'on_hand': [int(500 + rng.integers(2000)) for _ in SAMPLE_SKUS],
        'last_updated': pd.Timestamp(SAMPLE_END)
    })
