"""
Sites, addresses and the factory-default inventory.
"""
from typing import Dict, List

LOCATIONS: List[str] = [
    "2200 Jean-Jacques Cossette",
    "1200 6e rue",
    "1199 rue de l'Escale",
    "Forêt Récréative",
]

# Full addresses printed on pickup slips
LOCATION_ADDRESSES: Dict[str, Dict[str, str]] = {
    "2200 Jean-Jacques Cossette": {
        "street": "2200 Jean-Jacques Cossette",
        "city": "Saguenay, QC",
        "postal_code": "G7S 3H1",
        "full_address": "2200 Jean-Jacques Cossette, Saguenay, QC G7S 3H1",
    },
    "1200 6e rue": {
        "street": "1200 6e rue",
        "city": "Saguenay, QC",
        "postal_code": "G7B 2Z7",
        "full_address": "1200 6e rue, Saguenay, QC G7B 2Z7",
    },
    "1199 rue de l'Escale": {
        "street": "1199 rue de l'Escale",
        "city": "Saguenay, QC",
        "postal_code": "G7H 7Y1",
        "full_address": "1199 rue de l'Escale, Saguenay, QC G7H 7Y1",
    },
    "Forêt Récréative": {
        "street": "Forêt Récréative",
        "city": "Saguenay, QC",
        "postal_code": "",
        "full_address": "Forêt Récréative, Saguenay, QC",
    },
}

INITIAL_INVENTORY: List[Dict] = [
    # 2200 Jean-Jacques Cossette
    {"id": "1", "name": "Bac contenant Urée vide", "quantity": 2, "location": LOCATIONS[0]},

    # 1200 6e rue
    {"id": "3", "name": "Bac solides huileux", "quantity": 2, "location": LOCATIONS[1]},
    {"id": "4", "name": "Bac d'aérosols", "quantity": 1, "location": LOCATIONS[1]},
    {"id": "5", "name": "Baril d'essence huileuse", "quantity": 1, "location": LOCATIONS[1]},
    {"id": "6", "name": "Baril d'huile usée", "quantity": 1, "location": LOCATIONS[1]},
    {"id": "7", "name": "Bacs de contenants de plastique vides", "quantity": 3, "location": LOCATIONS[1]},
    {"id": "8", "name": "Barils de gallons de peinture", "quantity": 2, "location": LOCATIONS[1]},

    # 1199 rue de l'Escale
    {"id": "9", "name": "Bac Solide Huileux", "quantity": 2, "location": LOCATIONS[2]},
    {"id": "10", "name": "Bac Contenants de plastique vide", "quantity": 1, "location": LOCATIONS[2]},
    {"id": "11", "name": "Bac canettes Aérosol", "quantity": 1, "location": LOCATIONS[2]},
    {"id": "12", "name": "Bac contenant Urée vide", "quantity": 1, "location": LOCATIONS[2]},
    {"id": "13", "name": "Baril Gallon de peinture", "quantity": 1, "location": LOCATIONS[2]},
    {"id": "14", "name": "Baril contenants acétones et Gaz mixte", "quantity": 1, "location": LOCATIONS[2]},
]

# Items that can be requested at a site without being tracked in inventory
SPECIAL_ITEMS_BY_LOCATION: Dict[str, List[str]] = {
    LOCATIONS[0]: [
        "Baril colasse Plein",
        "Baril colasse Vide",
        "Baril fuel contaminé plein",
    ],
}

# Insight thresholds
ANOMALY_QUANTITY_THRESHOLD = 50
MAX_ANOMALIES = 3
PREDICTION_INTERVAL_RATIO = 0.8

# Remote batch write limit
MAX_BATCH_OPERATIONS = 500
