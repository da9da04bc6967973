from typing import Dict, List, Optional

from medtracker.schemas.models import MedicationData, MedicationStatement

def _key(stmt: MedicationStatement) -> str:
    return stmt.medication.strip().lower()

def merge_medication_data(current: Optional[MedicationData], incoming: MedicationData) -> MedicationData:
    """
    New MedicationData: incoming statements replace ones with the same name,
    unseen ones are appended. Order of first appearance is kept.
    """
    merged: Dict[str, MedicationStatement] = {}
    for s in (current.medication_statements if current else []):
        merged[_key(s)] = s
    for s in incoming.medication_statements:
        merged[_key(s)] = s

    statements: List[MedicationStatement] = list(merged.values())
    return MedicationData(
        medication_statements=statements,
        free_text_response=incoming.free_text_response,
    )
