import numpy as np

def summarize_values(values):
    if not values:
        return None
    a = np.array(values, dtype=float)
    return {
        "mean": float(a.mean()),
        "p90": float(np.quantile(a, 0.9)),
        "min": float(a.min()),
        "max": float(a.max()),
        "count": int(a.size),
    }
