"""Financial calculation functions.

Loan payment and amortization calculations for credit dossiers.
"""

from __future__ import annotations

import math
from typing import Any

import numpy_financial as npf


def _finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def compute_mensualite(
    montant: float,
    duree_mois: float,
    annual_rate_pct: float,
) -> float:
    """Calculate the monthly payment of an amortizing loan.

    Args:
        montant: Loan amount in €
        duree_mois: Loan term in months
        annual_rate_pct: Annual interest rate as percentage (e.g., 3.5 for 3.5%)

    Returns:
        Monthly payment in €, 0.0 when amount or term is not usable
    """
    if not _finite(montant, duree_mois, annual_rate_pct):
        return 0.0
    if montant <= 0 or duree_mois <= 0:
        return 0.0

    if annual_rate_pct <= 0:
        return montant / duree_mois

    monthly_rate = (annual_rate_pct / 100.0) / 12.0
    return float(-npf.pmt(monthly_rate, duree_mois, montant))


def build_amortization_schedule(
    montant: float,
    duree_mois: int,
    annual_rate_pct: float,
) -> dict[str, Any]:
    """Generate the month-by-month amortization schedule.

    Args:
        montant: Loan amount in €
        duree_mois: Loan term in months
        annual_rate_pct: Annual interest rate %

    Returns:
        Dict with keys:
        - mois: List of month numbers
        - capital_restant_debut: List of start balances
        - interet: List of interest payments
        - principal: List of principal payments
        - capital_restant_fin: List of end balances
        - mensualite: Monthly payment
        - cout_credit: Total interest paid
        - nmois: Number of months
    """
    mensualite = compute_mensualite(montant, duree_mois, annual_rate_pct)
    nmois = int(duree_mois) if mensualite > 0 else 0
    if nmois <= 0:
        return {
            "mois": [],
            "capital_restant_debut": [],
            "interet": [],
            "principal": [],
            "capital_restant_fin": [],
            "mensualite": 0.0,
            "cout_credit": 0.0,
            "nmois": 0,
        }

    monthly_rate = max(0.0, annual_rate_pct / 100.0 / 12.0)

    debut: list[float] = []
    interets: list[float] = []
    principals: list[float] = []
    fin: list[float] = []
    balance = float(montant)

    for _ in range(nmois):
        interest = balance * monthly_rate
        principal_payment = mensualite - interest
        new_balance = max(0.0, balance - principal_payment)

        debut.append(round(balance, 2))
        interets.append(round(interest, 2))
        principals.append(round(principal_payment, 2))
        fin.append(round(new_balance, 2))

        balance = new_balance

    return {
        "mois": list(range(1, nmois + 1)),
        "capital_restant_debut": debut,
        "interet": interets,
        "principal": principals,
        "capital_restant_fin": fin,
        "mensualite": mensualite,
        "cout_credit": round(mensualite * nmois - float(montant), 2),
        "nmois": nmois,
    }
