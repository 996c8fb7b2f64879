"""Standard treatment guidelines used by the pharmacy intents."""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Regimen:
    medication: str
    dosage: str
    duration: str
    notes: Optional[str] = None

    def line(self) -> str:
        note = f" ({self.notes})" if self.notes else ""
        return f"• {self.medication} {self.dosage} - {self.duration}{note}"


@dataclass(frozen=True)
class Guideline:
    id: str
    condition: str
    symptoms: Tuple[str, ...]
    first_line: Tuple[Regimen, ...]
    precautions: Tuple[str, ...]
    when_to_refer: Tuple[str, ...]
    patient_counseling: Tuple[str, ...]
    second_line: Tuple[Regimen, ...] = field(default_factory=tuple)

    def lists(self, drug: str) -> Tuple[bool, bool]:
        """Whether ``drug`` appears in the first-line and second-line regimens."""
        d = drug.lower()
        in_first = any(d in r.medication.lower() for r in self.first_line)
        in_second = any(d in r.medication.lower() for r in self.second_line)
        return in_first, in_second


GUIDELINES: Tuple[Guideline, ...] = (
    Guideline(
        "cardiac-arrest-01", "Cardiac Arrest", ("Unresponsive", "No pulse", "Apnea"),
        (Regimen("Adrenaline", "1 mg IV", "every 3-5 min", "During CPR"),),
        ("Ensure high-quality CPR", "Early defibrillation where appropriate"),
        ("Return of spontaneous circulation then ICU",),
        ("Post-resuscitation care required",),
    ),
    Guideline(
        "anaphylaxis-01", "Anaphylaxis", ("Urticaria", "Hypotension", "Bronchospasm"),
        (Regimen("Adrenaline", "0.01 mg/kg IM (max 0.5 mg)", "repeat every 5-15 min", "First drug"),),
        ("None - life-saving",),
        ("Hospital observation 4-6 h",),
        ("Carry epinephrine auto-injector",),
    ),
    Guideline(
        "shock-01", "Shock (General)", ("Hypotension", "Tachycardia"),
        (Regimen("Normal Saline", "20 ml/kg bolus", "single", "Assess response"),),
        ("Avoid overload in cardiogenic shock",),
        ("ICU if persistent",),
        ("Early presentation improves survival",),
    ),
    Guideline(
        "malaria-uncomp-01", "Malaria (Uncomplicated)", ("Fever", "Chills"),
        (Regimen("Artemether-Lumefantrine", "weight-based", "twice daily for 3 days", "ACT"),),
        ("Avoid in first trimester unless necessary",),
        ("No improvement in 48 h",),
        ("Complete full 6-dose course with food",),
    ),
    Guideline(
        "malaria-severe-01", "Severe Malaria", ("Altered consciousness", "Severe anemia"),
        (Regimen("Artesunate", "2.4 mg/kg IV at 0,12,24 h", "then daily", "Switch to oral ACT when able"),),
        ("Monitor glucose",),
        ("ICU if multi-organ failure",),
        ("Follow full ACT course after IV",),
    ),
    Guideline(
        "status-epilepticus-01", "Status Epilepticus", ("Prolonged seizure",),
        (
            Regimen("Diazepam", "0.15-0.2 mg/kg IV", "slow push", "Max 10 mg"),
            Regimen("Phenytoin", "15-20 mg/kg IV", "loading", "Infuse slowly"),
        ),
        ("Maintain airway",),
        ("ICU if refractory",),
        ("Adherence to antiepileptics",),
    ),
    Guideline(
        "fever-01", "Fever (Pyrexia)", ("Fever", "Chills", "Sweats"),
        (Regimen("Paracetamol", "15 mg/kg", "every 6 h", "Max 60 mg/kg/day"),),
        ("Avoid NSAIDs in GI/renal risk",),
        (">39°C >3 days", "Severe systemic signs"),
        ("Hydrate", "Seek care if worsening"),
    ),
    Guideline(
        "cholera-01", "Cholera", ("Profuse watery diarrhea", "Dehydration"),
        (
            Regimen("Oral Rehydration Solution", "As needed", "ongoing", "Primary therapy"),
            Regimen("Ringer's Lactate", "As per WHO plan", "IV", "Moderate/severe dehydration"),
            Regimen("Doxycycline", "300 mg PO once", "single", "Adults"),
        ),
        ("Tetracycline contraindicated in <8 yrs & pregnancy",),
        ("Severe dehydration", "Pregnancy"),
        ("Safe water", "Hand hygiene"),
    ),
    Guideline(
        "typhoid-01", "Typhoid Fever", ("Fever", "Abdominal pain", "Constipation"),
        (Regimen("Ciprofloxacin", "500 mg PO", "BID 7-14 days"),),
        ("Fluoroquinolone caution in children/pregnancy",),
        ("Complications", "Treatment failure"),
        ("Safe food & water", "Complete course"),
        second_line=(Regimen("Ceftriaxone", "2 g IV/IM", "daily 10-14 days"),),
    ),
    Guideline(
        "hiv-01", "HIV/AIDS (Adults)", ("Weight loss", "Opportunistic infections"),
        (Regimen("TDF/3TC/DTG", "Fixed-dose tab", "daily", "First-line"),),
        ("Baseline creatinine", "Avoid DTG 1st trimester"),
        ("Treatment failure", "Severe ADRs"),
        ("Adherence critical", "Regular viral load"),
    ),
    Guideline(
        "pneumonia-01", "Pneumonia (Community-Acquired - Adults)", ("Cough", "Fever", "Dyspnea"),
        (Regimen("Amoxicillin", "500-1000 mg PO", "q8h 5-7 days"),),
        ("Penicillin allergy",),
        ("Respiratory failure", "Severe CAP score"),
        ("Complete antibiotics", "Hydration"),
        second_line=(Regimen("Benzylpenicillin", "2 MU IV", "q6h", "Severe cases"),),
    ),
    Guideline(
        "uti-01", "Uncomplicated Urinary Tract Infection (UTI)", ("Dysuria", "Frequency", "Urgency", "Suprapubic pain"),
        (
            Regimen("Nitrofurantoin", "100mg", "5 days", "Avoid in G6PD deficiency, renal impairment (eGFR <45)"),
            Regimen("Trimethoprim/sulfamethoxazole", "160/800mg", "3 days", "If local resistance <20%"),
        ),
        ("Increase fluid intake", "Urinate after intercourse"),
        ("Pregnancy", "Fever or flank pain"),
        ("Complete the full course",),
        second_line=(Regimen("Ciprofloxacin", "250mg", "3 days", "Reserve for resistant cases"),),
    ),
)

_STOPWORDS = frozenset({"for", "the", "and", "with", "treat", "treatment", "manage", "guideline", "therapy"})


def find_guidelines(query: str) -> List[Guideline]:
    """Match on the whole query first, then on any non-filler token."""
    term = (query or "").lower().strip()
    if not term:
        return []
    tokens = [t for t in re.split(r"[^a-z0-9]+", term) if len(t) > 2 and t not in _STOPWORDS]

    found = []
    for g in GUIDELINES:
        cond = g.condition.lower()
        sym = " ".join(s.lower() for s in g.symptoms)
        if term in cond or term in sym or any(t in cond or t in sym for t in tokens):
            found.append(g)
    return found


def format_guideline(g: Guideline) -> str:
    parts = [f"🏥 **{g.condition}**", "", "💊 **First-line Treatment:**"]
    parts.extend(r.line() for r in g.first_line)
    if g.second_line:
        parts += ["", "💊 **Second-line (if needed):**"]
        parts.extend(r.line() for r in g.second_line)
    parts += [
        "",
        f"**Precautions:** {', '.join(g.precautions)}",
        f"**Refer if:** {', '.join(g.when_to_refer)}",
        f"**Counseling:** {', '.join(g.patient_counseling)}",
    ]
    return "\n".join(parts)
