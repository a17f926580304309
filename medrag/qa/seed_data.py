"""Curated sample corpus used by the demo app and the validation suite."""

from __future__ import annotations

from dataclasses import dataclass

from .schemas import Document, Entity, Relationship
from .stores import InMemoryDocumentStore, InMemoryGraphStore


@dataclass(frozen=True)
class SeedEntity:
    entity_type: str
    name: str
    description: str
    source: str


@dataclass(frozen=True)
class SeedEdge:
    from_name: str
    to_name: str
    relationship_type: str
    confidence: float
    source: str


@dataclass(frozen=True)
class SeedDocument:
    title: str
    content: str
    source: str
    doc_type: str


SAMPLE_ENTITIES: tuple[SeedEntity, ...] = (
    SeedEntity("disease", "Type 2 Diabetes", "A chronic metabolic disorder characterized by high blood sugar levels due to insulin resistance and relative insulin deficiency.", "MedlinePlus"),
    SeedEntity("symptom", "Increased thirst", "Excessive thirst and fluid intake, often a symptom of diabetes.", "Medical Knowledge Base"),
    SeedEntity("symptom", "Frequent urination", "Urinating more often than usual, particularly at night.", "Medical Knowledge Base"),
    SeedEntity("symptom", "Fatigue", "Persistent tiredness and lack of energy.", "Medical Knowledge Base"),
    SeedEntity("treatment", "Metformin", "A first-line medication for type 2 diabetes that helps control blood sugar levels.", "PubMed"),
    SeedEntity("treatment", "Lifestyle modification", "Changes to diet and exercise patterns to manage diabetes.", "Clinical Guidelines"),
    SeedEntity("disease", "Hypertension", "High blood pressure, a condition where the force of blood against artery walls is consistently too high.", "MedlinePlus"),
    SeedEntity("symptom", "Headache", "Pain in any region of the head, can be a symptom of various conditions.", "Medical Knowledge Base"),
    SeedEntity("treatment", "ACE inhibitors", "Medications that help relax blood vessels and lower blood pressure.", "PubMed"),
    SeedEntity("disease", "Asthma", "A chronic respiratory condition causing inflammation and narrowing of the airways.", "MedlinePlus"),
    SeedEntity("symptom", "Wheezing", "A whistling sound when breathing, often associated with asthma.", "Medical Knowledge Base"),
    SeedEntity("symptom", "Shortness of breath", "Difficulty breathing or feeling like you cannot get enough air.", "Medical Knowledge Base"),
    SeedEntity("treatment", "Inhaled corticosteroids", "Anti-inflammatory medications delivered directly to the lungs to control asthma.", "Clinical Guidelines"),
    SeedEntity("disease", "Migraine", "A neurological condition characterized by intense, debilitating headaches often accompanied by nausea and sensitivity to light.", "MedlinePlus"),
    SeedEntity("symptom", "Nausea", "A feeling of sickness with an inclination to vomit.", "Medical Knowledge Base"),
    SeedEntity("treatment", "Triptans", "Medications specifically designed to treat migraine headaches.", "PubMed"),
)

SAMPLE_RELATIONSHIPS: tuple[SeedEdge, ...] = (
    SeedEdge("Type 2 Diabetes", "Increased thirst", "has_symptom", 0.95, "Clinical Evidence"),
    SeedEdge("Type 2 Diabetes", "Frequent urination", "has_symptom", 0.95, "Clinical Evidence"),
    SeedEdge("Type 2 Diabetes", "Fatigue", "has_symptom", 0.85, "Clinical Evidence"),
    SeedEdge("Metformin", "Type 2 Diabetes", "treats", 0.98, "Clinical Guidelines"),
    SeedEdge("Lifestyle modification", "Type 2 Diabetes", "treats", 0.9, "Clinical Guidelines"),
    SeedEdge("Hypertension", "Headache", "has_symptom", 0.7, "Clinical Evidence"),
    SeedEdge("ACE inhibitors", "Hypertension", "treats", 0.95, "Clinical Guidelines"),
    SeedEdge("Asthma", "Wheezing", "has_symptom", 0.9, "Clinical Evidence"),
    SeedEdge("Asthma", "Shortness of breath", "has_symptom", 0.9, "Clinical Evidence"),
    SeedEdge("Inhaled corticosteroids", "Asthma", "treats", 0.95, "Clinical Guidelines"),
    SeedEdge("Migraine", "Headache", "has_symptom", 0.98, "Clinical Evidence"),
    SeedEdge("Migraine", "Nausea", "has_symptom", 0.85, "Clinical Evidence"),
    SeedEdge("Triptans", "Migraine", "treats", 0.92, "Clinical Guidelines"),
)

SAMPLE_DOCUMENTS: tuple[SeedDocument, ...] = (
    SeedDocument(
        "Understanding Type 2 Diabetes",
        "Type 2 diabetes is a chronic condition that affects the way your body metabolizes sugar (glucose). With type 2 diabetes, your body either resists the effects of insulin or does not produce enough insulin to maintain normal glucose levels. Common symptoms include increased thirst, frequent urination, fatigue, blurred vision, and slow-healing sores. Treatment typically involves lifestyle changes, monitoring blood sugar, diabetes medications, and sometimes insulin therapy.",
        "MedlinePlus",
        "article",
    ),
    SeedDocument(
        "Diabetes Management Through Diet and Exercise",
        "Managing type 2 diabetes requires a comprehensive approach. A healthy diet rich in vegetables, whole grains, and lean proteins combined with regular physical activity can significantly improve blood sugar control. Exercise helps your body use insulin more efficiently. The American Diabetes Association recommends at least 150 minutes of moderate-intensity aerobic activity per week, spread over at least three days.",
        "Clinical Guidelines",
        "guide",
    ),
    SeedDocument(
        "Metformin in Type 2 Diabetes Treatment",
        "Metformin is the most commonly prescribed medication for type 2 diabetes. It works by reducing glucose production in the liver and improving insulin sensitivity in muscle tissue. Studies have shown that metformin is effective in lowering HbA1c levels by 1-2%. Common side effects include gastrointestinal symptoms, which usually improve over time.",
        "PubMed Abstract",
        "abstract",
    ),
    SeedDocument(
        "Hypertension: The Silent Killer",
        "Hypertension, or high blood pressure, often has no symptoms but can lead to serious health complications including heart disease, stroke, and kidney disease. Blood pressure is measured in millimeters of mercury (mmHg) and is recorded as two numbers: systolic pressure (when the heart beats) over diastolic pressure (when the heart rests). A reading of 130/80 mmHg or higher is considered high blood pressure.",
        "MedlinePlus",
        "article",
    ),
    SeedDocument(
        "Treatment Options for Hypertension",
        "Treatment for hypertension typically begins with lifestyle modifications including reducing sodium intake, maintaining a healthy weight, regular exercise, limiting alcohol, and managing stress. When lifestyle changes are not sufficient, medications such as ACE inhibitors, beta-blockers, calcium channel blockers, or diuretics may be prescribed. The goal is to reduce blood pressure to below 130/80 mmHg.",
        "Clinical Guidelines",
        "guide",
    ),
    SeedDocument(
        "Asthma: Symptoms and Triggers",
        "Asthma is a chronic inflammatory disease of the airways characterized by recurring episodes of wheezing, breathlessness, chest tightness, and coughing. Common triggers include allergens (pollen, dust mites, pet dander), respiratory infections, exercise, cold air, and air pollution. Symptoms can range from mild to severe and may vary from person to person.",
        "MedlinePlus",
        "article",
    ),
    SeedDocument(
        "Asthma Management Guidelines",
        "Effective asthma management involves avoiding triggers, taking medications as prescribed, and monitoring symptoms. Controller medications, such as inhaled corticosteroids, are taken daily to reduce airway inflammation and prevent symptoms. Rescue medications, such as short-acting beta-agonists, provide quick relief during asthma attacks. An asthma action plan helps patients know what to do when symptoms worsen.",
        "Clinical Guidelines",
        "guide",
    ),
    SeedDocument(
        "Migraine Headaches: Understanding the Condition",
        "Migraines are intense headaches that can cause severe throbbing pain or a pulsing sensation, usually on one side of the head. They are often accompanied by nausea, vomiting, and extreme sensitivity to light and sound. Migraine attacks can last for hours to days, and the pain can be so severe that it interferes with daily activities. Some people experience warning symptoms known as aura before the headache begins.",
        "MedlinePlus",
        "article",
    ),
    SeedDocument(
        "Migraine Treatment Strategies",
        "Migraine treatment aims to relieve symptoms and prevent future attacks. Acute treatment includes pain relievers, triptans, and anti-nausea medications. Preventive medications may be prescribed for people who experience frequent or severe migraines. Lifestyle modifications such as maintaining a regular sleep schedule, managing stress, staying hydrated, and identifying and avoiding triggers can also help reduce migraine frequency.",
        "Clinical Guidelines",
        "guide",
    ),
)


def sample_entities() -> list[Entity]:
    return [
        Entity(id=f"ent-{idx}", name=e.name, description=e.description, entity_type=e.entity_type, source=e.source)
        for idx, e in enumerate(SAMPLE_ENTITIES, start=1)
    ]


def sample_relationships(entities: list[Entity]) -> list[Relationship]:
    ids = {entity.name: entity.id for entity in entities}
    return [
        Relationship(
            id=f"rel-{idx}",
            from_entity_id=ids[edge.from_name],
            to_entity_id=ids[edge.to_name],
            relationship_type=edge.relationship_type,
            confidence=edge.confidence,
            source=edge.source,
        )
        for idx, edge in enumerate(SAMPLE_RELATIONSHIPS, start=1)
    ]


def sample_documents() -> list[Document]:
    return [
        Document(id=f"doc-{idx}", title=d.title, content=d.content, source=d.source, doc_type=d.doc_type)
        for idx, d in enumerate(SAMPLE_DOCUMENTS, start=1)
    ]


def build_seeded_stores() -> tuple[InMemoryGraphStore, InMemoryDocumentStore]:
    """Return graph and document stores loaded with the sample corpus."""

    entities = sample_entities()
    return (
        InMemoryGraphStore(entities, sample_relationships(entities)),
        InMemoryDocumentStore(sample_documents()),
    )
