"""
Business Rules Configuration
Centralized definitions for forecasting, inventory policy and classification constants.
This file allows rules to be changed in one place without modifying tool code.
"""

from datetime import datetime
import copy

# ===== FORECASTING RULES =====

FORECAST_RULES = {
    # Forecasting is undefined below this many historical periods
    "min_history_points": 3,

    # Monthly data only: one seasonal cycle = 12 periods
    "seasonality_period": 12,

    "holt_winters": {
        "alpha": 0.3,   # Level smoothing
        "beta": 0.1,    # Trend smoothing
        "gamma": 0.2    # Seasonal smoothing
    },

    "prophet_simulation": {
        # > 1 biases the simulated trend above plain linear extrapolation
        "growth_amplification": 1.2
    },

    "arima_simulation": {
        # Share of the previous deviation from the mean kept at each step
        "ar_coefficient": 0.85
    },

    # Narrows the confidence band relative to the raw z * sigma * sqrt(step) interval
    "uncertainty_damping": 0.5,

    "default_method": "Holt-Winters (Triple Exponential)",
    "default_horizon": 12,
    "default_confidence_level": 95
}


# ===== Z-SCORE TABLES =====
# Descending (inclusive lower bound, z) bands. First match wins.

CONFIDENCE_Z_BANDS = [
    (99, 2.576),
    (95, 1.96),
    (90, 1.645)
]
CONFIDENCE_Z_FALLBACK = 1.28

SERVICE_LEVEL_Z_BANDS = [
    (0.999, 3.09),
    (0.99, 2.33),
    (0.98, 2.05),
    (0.95, 1.645),
    (0.90, 1.28),
    (0.85, 1.04),
    (0.80, 0.84)
]
SERVICE_LEVEL_Z_FALLBACK = 0.5


# ===== ANOMALY RULES =====

ANOMALY_RULES = {
    # Observations further than this many standard deviations from the mean are smoothed
    "z_score_threshold": 2.0,

    # Looser band used only to list points for root-cause review
    "outlier_review_threshold": 1.5,
    "outlier_review_limit": 5
}


# ===== SUPPLY CHAIN RULES =====

SUPPLY_CHAIN_RULES = {
    "days_per_period": 30,              # 30-day month approximation
    "default_lead_time_days": 30,
    "default_service_level": 0.95,
    "default_selling_price": 150.0,     # Used when no product attributes are supplied
    "default_unit_cost": 100.0,
    "value_at_risk_factor": 0.25        # Share of revenue exposed per unit of supplier volatility
}


# ===== FORECAST ACCURACY RULES =====

ACCURACY_RULES = {
    "holding_rate": 0.02,               # Monthly carrying cost as a fraction of unit cost
    "default_unit_cost": 50.0,
    "default_selling_price": 100.0
}

BACKTEST_RULES = {
    "holdout_periods": 6,
    "min_history_points": 9             # Backtest requires more than 8 periods
}


# ===== ABC / PARETO RULES =====

PARETO_RULES = {
    "a_threshold": 80.0,    # Cumulative share <= 80% is class A
    "b_threshold": 95.0     # Cumulative share <= 95% is class B, remainder C
}


# ===== UPLOAD FIELD DEFINITIONS =====

DATA_FIELD_DEFINITIONS = {
    "sales": {
        "file": "SALES_HISTORY.csv",
        "columns": ["date", "sku", "category", "quantity"],
        "description": "One row per SKU per period with the quantity demanded"
    },
    "attributes": {
        "file": "PRODUCT_ATTRIBUTES.csv",
        "columns": ["sku", "category", "lead_time_days", "unit_cost", "selling_price", "service_level"],
        "defaults": {
            "lead_time_days": 30,
            "unit_cost": 10.0,
            "selling_price": 15.0,
            "service_level": 0.95
        },
        "description": "Per-SKU operating parameters"
    },
    "inventory": {
        "file": "INVENTORY.csv",
        "columns": ["sku", "on_hand"],
        "description": "Current physical stock per SKU"
    }
}


# ===== DASHBOARD SETTINGS =====

DEFAULT_SETTINGS = {
    "horizon": FORECAST_RULES["default_horizon"],
    "confidence_level": FORECAST_RULES["default_confidence_level"],
    "method": FORECAST_RULES["default_method"],
    "lead_time_days": None,             # None = average of selected SKU attributes
    "service_level": None,
    "supplier_volatility": 0.0,
    "apply_anomaly_cleaning": False,
    "show_lead_time_offset": False,
    "skus": [],                         # Empty = all SKUs
    "category": "All",
    "start_date": None,
    "end_date": None,
    "market_multiplier": 1.0
}


def get_default_settings():
    """Return a fresh copy of the default analysis settings"""
    return copy.deepcopy(DEFAULT_SETTINGS)


def export_business_rules_documentation(output_path="BUSINESS_RULES_DOCUMENTATION.md"):
    """
    Export the active business rules as a Markdown document.

    Args:
        output_path: Destination file path

    Returns:
        str: The path written
    """
    lines = [
        "# Demand Planning Business Rules",
        "",
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        "",
        "## Forecasting",
        "",
        f"- Minimum history: {FORECAST_RULES['min_history_points']} periods",
        f"- Seasonality period: {FORECAST_RULES['seasonality_period']} months",
        f"- Holt-Winters smoothing: alpha={FORECAST_RULES['holt_winters']['alpha']}, "
        f"beta={FORECAST_RULES['holt_winters']['beta']}, gamma={FORECAST_RULES['holt_winters']['gamma']}",
        f"- Confidence band damping: {FORECAST_RULES['uncertainty_damping']}",
        "",
        "## Confidence Level Z-Multipliers",
        ""
    ]
    for threshold, z in CONFIDENCE_Z_BANDS:
        lines.append(f"- >= {threshold}%: {z}")
    lines.append(f"- otherwise: {CONFIDENCE_Z_FALLBACK}")

    lines += ["", "## Service Level Z-Scores", ""]
    for threshold, z in SERVICE_LEVEL_Z_BANDS:
        lines.append(f"- >= {threshold:.1%}: {z}")
    lines.append(f"- otherwise: {SERVICE_LEVEL_Z_FALLBACK}")

    lines += [
        "",
        "## Anomalies",
        "",
        f"- Smoothing threshold: {ANOMALY_RULES['z_score_threshold']} standard deviations",
        "",
        "## Inventory Policy",
        "",
        f"- Days per period: {SUPPLY_CHAIN_RULES['days_per_period']}",
        f"- Holding rate: {ACCURACY_RULES['holding_rate']:.0%} per month",
        "",
        "## ABC Classification",
        "",
        f"- A: cumulative share <= {PARETO_RULES['a_threshold']:.0f}%",
        f"- B: cumulative share <= {PARETO_RULES['b_threshold']:.0f}%",
        "- C: remainder",
        ""
    ]

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))

    return output_path


if __name__ == "__main__":
    # Export documentation when run directly
    path = export_business_rules_documentation()
    print(f"Business rules documentation exported to {path}")
