"""Credit ratio engine.

Accepts both calling conventions used by the bank screens:

* dossier page: ``{montantPret, duree, budget, revenus, garanties, bien}``
  with French field names (``coutAcquisition``, ``revenusMensuels``, ...);
* analysis page: ``{loanAmount, durationMonths, annualRatePct, ...}`` with
  English field names (``purchasePrice``, ``incomeMonthlyNet``, ...).

``resolve_ratio_inputs`` turns either shape into ``RatioInputs``;
``compute_ratios`` only works on the resolved values.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mimmoza.core.exceptions import InvalidParameterError
from mimmoza.core.financial import compute_mensualite
from mimmoza.core.scoring_constants import DEFAULT_RATE_PCT, RATIO_BANDS
from mimmoza.domain.calculator.lookup import first_number, pick
from mimmoza.domain.models.ratios import RatioHealth, RatioInputs, RatiosResult


def _block(params: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = params.get(key)
    return value if isinstance(value, Mapping) else {}


def resolve_ratio_inputs(
    params: Mapping[str, Any] | None = None,
    *,
    default_rate_pct: float = DEFAULT_RATE_PCT,
) -> RatioInputs:
    """Resolve both naming conventions into canonical inputs.

    French names take priority over English ones. The rate comes from the
    explicit ``annualRatePct`` parameter, then ``budget.rateAnnualPct``, then
    ``default_rate_pct``.
    """
    params = params or {}
    budget = _block(params, "budget")
    revenus = _block(params, "revenus")
    garanties = _block(params, "garanties")
    bien = _block(params, "bien")

    rate = first_number(params.get("annualRatePct"), budget.get("rateAnnualPct"))

    return RatioInputs(
        montant_pret=pick(params.get("montantPret"), params.get("loanAmount")),
        duree_mois=pick(params.get("duree"), params.get("durationMonths")),
        annual_rate_pct=rate if rate is not None else default_rate_pct,
        acquisition=pick(budget.get("coutAcquisition"), budget.get("purchasePrice")),
        travaux=pick(budget.get("coutTravaux"), budget.get("works")),
        frais=pick(budget.get("frais"), budget.get("fees")),
        valeur_bien=pick(
            bien.get("valeurEstimee"),
            garanties.get("valeurBien"),
            garanties.get("couvertureTotale"),
        ),
        revenus_mensuels=pick(revenus.get("revenusMensuels"), revenus.get("incomeMonthlyNet")),
        charges_existantes=first_number(revenus.get("chargesExistantes")) or 0.0,
        loyers_mensuels=pick(revenus.get("loyersMensuels"), revenus.get("rentMonthly")),
    )


def ratios_from_inputs(inputs: RatioInputs) -> RatiosResult:
    """Compute payment and ratios from resolved inputs."""
    mensualite = compute_mensualite(inputs.montant_pret, inputs.duree_mois, inputs.annual_rate_pct)
    cout_total = inputs.cout_total

    ltv = inputs.montant_pret / inputs.valeur_bien if inputs.valeur_bien > 0 else None
    ltc = inputs.montant_pret / cout_total if cout_total > 0 else None
    dsti = (
        (inputs.charges_existantes + mensualite) / inputs.revenus_mensuels
        if inputs.revenus_mensuels > 0
        else None
    )
    dscr = (
        inputs.loyers_mensuels / mensualite
        if mensualite > 0 and inputs.loyers_mensuels > 0
        else None
    )

    return RatiosResult(
        mensualite=mensualite,
        cout_total=cout_total,
        ltv=ltv,
        ltc=ltc,
        dsti=dsti,
        dscr=dscr,
        annual_rate_pct=inputs.annual_rate_pct,
    )


def compute_ratios(
    params: Mapping[str, Any] | None = None,
    *,
    default_rate_pct: float = DEFAULT_RATE_PCT,
    **kwargs: Any,
) -> RatiosResult:
    """Compute monthly payment, total cost, LTV, LTC, DSTI and DSCR.

    Args:
        params: Dossier-page or analysis-page parameters
        default_rate_pct: Rate used when none is supplied
        **kwargs: Same keys as ``params``, merged over it

    Returns:
        RatiosResult; ratios with no usable denominator are None
    """
    merged = {**(params or {}), **kwargs}
    return ratios_from_inputs(resolve_ratio_inputs(merged, default_rate_pct=default_rate_pct))


def assess_ratio(key: str, value: float | None) -> RatioHealth:
    """Band a ratio as the committee reads it.

    LTV/LTC are good up to 70% and acceptable up to 85%; DSTI good up to 30%
    and acceptable up to the 35% HCSF cap; DSCR good from 1.2 and acceptable
    from 1.0.
    """
    if key not in RATIO_BANDS:
        raise InvalidParameterError("key", key, f"expected one of {sorted(RATIO_BANDS)}")
    if value is None:
        return RatioHealth.INDISPONIBLE

    good, watch, higher_is_better = RATIO_BANDS[key]
    if higher_is_better:
        if value >= good:
            return RatioHealth.BON
        if value >= watch:
            return RatioHealth.VIGILANCE
        return RatioHealth.CRITIQUE

    if value <= good:
        return RatioHealth.BON
    if value <= watch:
        return RatioHealth.VIGILANCE
    return RatioHealth.CRITIQUE
