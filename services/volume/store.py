from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Tuple

from pydantic import ValidationError

from schemas.volume import Customer, VolumeRecord

logger = logging.getLogger(__name__)

VOLUME_DATA_PATH = os.getenv("VOLUME_DATA_PATH", "")

DEFAULT_CUSTOMERS: List[Customer] = [
    Customer(id="1", customerCode="RGJ001", customer="GloveMax Industries", area="JHR", sector="Rubber gloves", segment="Elite"),
    Customer(id="2", customerCode="OCP002", customer="TropicChem Products", area="PRK", sector="Oleochemical", segment="Premium"),
    Customer(id="3", customerCode="CPM003", customer="EssentialGoods Co", area="SWP", sector="Consumer Products", segment="Preferred"),
    Customer(id="4", customerCode="RGP004", customer="MediShield Gloves", area="PKP", sector="Rubber gloves", segment="Premium"),
    Customer(id="5", customerCode="MFJ005", customer="PrecisionTech Industries", area="JHR", sector="Manufacturing", segment="Elite"),
    Customer(id="6", customerCode="OCP006", customer="NaturalChem Solutions", area="PRK", sector="Oleochemical", segment="Preferred"),
    Customer(id="7", customerCode="CPM007", customer="HomeEssentials Ltd", area="MNS", sector="Consumer Products", segment="Premium"),
    Customer(id="8", customerCode="FBP008", customer="TastyTreats Food Co", area="PTK", sector="Food & Beverage", segment="Preferred"),
    Customer(id="9", customerCode="PHJ009", customer="VitalCare Pharma", area="JHR", sector="Pharmaceuticals", segment="Elite"),
    Customer(id="10", customerCode="MFP010", customer="InnovateX Manufacturing", area="PKP", sector="Manufacturing", segment="Premium"),
]


class VolumeDataError(RuntimeError):
    """Raised when the configured volume dataset cannot be parsed."""


def parse_volume_dataset(raw: dict) -> Tuple[List[Customer], List[VolumeRecord]]:
    try:
        customers = [Customer.model_validate(item) for item in raw.get("customers") or []]
        records = [VolumeRecord.model_validate(item) for item in raw.get("volume") or []]
    except ValidationError as exc:
        raise VolumeDataError(f"Invalid volume dataset: {exc.error_count()} errors") from exc
    return customers or list(DEFAULT_CUSTOMERS), records


@lru_cache(maxsize=4)
def load_volume_dataset(path: str = VOLUME_DATA_PATH) -> Tuple[List[Customer], List[VolumeRecord]]:
    """
    Load ``{"customers": [...], "volume": [...]}`` from ``path``.
    Without a file the demo roster is returned with no volume records.
    """
    if not path or not Path(path).is_file():
        if path:
            logger.warning("volume.dataset.missing path=%s", path)
        return list(DEFAULT_CUSTOMERS), []

    with open(path, "r", encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise VolumeDataError(f"Volume dataset is not valid JSON: {exc}") from exc

    customers, records = parse_volume_dataset(raw if isinstance(raw, dict) else {})
    logger.info("volume.dataset.loaded customers=%s records=%s", len(customers), len(records))
    return customers, records
