"""
mimmoza - Real Estate Lending & Development Scoring Engine

Scores development projects and credit dossiers from already-fetched public
data (INSEE, DVF, BPE, FINESS, Géorisques) and loan parameters.

Modules:
    - core: Settings, logging, exceptions, constants and loan maths
    - domain.models: Pydantic models for scores, ratios and committee data
    - domain.calculator: Normalization, ratio, committee, decision, bank
      SmartScore and dossier engines
    - domain.scorers: Project-type SmartScore engines
    - services: Settings-driven orchestration with logging
"""

__version__ = "1.0.0"
