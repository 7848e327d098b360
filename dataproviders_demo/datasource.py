import datetime as dt
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .config import DemoSettings

COLUMNS = ["date", "product", "region", "system", "team", "owner", "status", "revenue", "cost", "profit"]


class MetricsRepository:
    """Synthetic analytics facts backing the example dashboard."""

    products = ["Alpha", "Beta", "Gamma", "Delta"]
    regions = ["APAC", "EMEA", "AMER", "India"]
    systems = ["Payments", "CoreBanking", "DataLake", "API-Gateway", "Mobile", "Web"]
    teams = ["Platform", "Retail", "Corporate", "Data", "Integration"]
    owners = ["alice", "bob", "carol", "dave", "erin"]
    statuses = ["Green", "Amber", "Red"]

    def __init__(self, settings: DemoSettings, seed: int = 42) -> None:
        self.settings = settings
        self.seed = seed

    def frame(self, team: Optional[str] = None) -> pd.DataFrame:
        rows = self.settings.max_rows
        rng = np.random.default_rng(self.seed)
        days = pd.date_range(dt.date.today() - dt.timedelta(days=90), periods=91, freq="D")
        df = pd.DataFrame({
            "date": rng.choice(days, size=rows),
            "product": rng.choice(self.products, size=rows),
            "region": rng.choice(self.regions, size=rows),
            "system": rng.choice(self.systems, size=rows),
            "team": rng.choice(self.teams, size=rows),
            "owner": rng.choice(self.owners, size=rows),
            "status": rng.choice(self.statuses, size=rows, p=[0.7, 0.2, 0.1]),
            "revenue": rng.normal(100000, 25000, size=rows).clip(min=1000),
            "cost": rng.normal(60000, 15000, size=rows).clip(min=500),
        })
        df["profit"] = df["revenue"] - df["cost"]
        df["date"] = pd.to_datetime(df["date"]).dt.strftime("%Y-%m-%d")
        if team:
            df = df[df["team"] == team].reset_index(drop=True)
        return df[COLUMNS]

    def options(self, column: str) -> List[str]:
        return sorted(self.frame()[column].dropna().unique().tolist())

    def kpis(self, team: Optional[str] = None) -> Dict[str, Any]:
        df = self.frame(team)
        latest = df["date"].max() if not df.empty else None
        return {
            "revenue": float(df["revenue"].sum()),
            "cost": float(df["cost"].sum()),
            "profit": float(df["profit"].sum()),
            "red_systems": int(df[(df["date"] == latest) & (df["status"] == "Red")]["system"].nunique()),
        }

    def trend(self, team: Optional[str] = None) -> List[Dict[str, Any]]:
        df = self.frame(team)
        if df.empty:
            return []
        trend = df.groupby("date")["profit"].sum().reset_index().sort_values("date")
        return trend.to_dict(orient="records")

    def rows(self, team: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.frame(team).to_dict(orient="records")
