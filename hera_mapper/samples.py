"""Built-in demonstration dataset: a restaurant with its address and menu."""
from copy import deepcopy
from typing import Any, Dict

from hera_mapper.mapper.session_builder import AnalysisResult, SessionBuilder

SAMPLE_SOURCE_NAME = "chef_lebanon"

CHEF_LEBANON_DATA: Dict[str, Any] = {
    "restaurants": [
        {
            "restaurant_id": 1,
            "name": "Chef Lebanon",
            "phone": "+91‑9846979500",
            "rating": 4.1,
            "delivery": True,
        }
    ],
    "addresses": [
        {
            "address_id": 1,
            "restaurant_id": 1,
            "street": "07/922A Nechikkatil Building, Opp. Ayurvedic Nursing Home, Changuvetty",
            "city": "Kottakkal",
            "district": "Malappuram",
            "state": "Kerala",
            "country": "India",
            "postal_code": "676501",
        }
    ],
    "menu_sections": [
        {"section_id": 1, "restaurant_id": 1, "name": "Pizza And Oven Bread"},
        {"section_id": 2, "restaurant_id": 1, "name": "Sandwiches"},
        {"section_id": 4, "restaurant_id": 1, "name": "Mezza & Salad"},
        {"section_id": 5, "restaurant_id": 1, "name": "Main Course"},
    ],
    "menu_items": [
        {"item_id": 101, "section_id": 1, "name": "Cheese", "price": 280, "description": None},
        {"item_id": 102, "section_id": 1, "name": "Chicken Ranch Pizza", "price": 780, "description": None},
        {
            "item_id": 201,
            "section_id": 2,
            "name": "Shishtaouk Sandwich",
            "price": 350,
            "description": "Shish taouk chicken with garlic, lettuce, tomato, French fries and pickle",
        },
        {
            "item_id": 401,
            "section_id": 4,
            "name": "Fattoush",
            "price": 350,
            "description": "Lebanese chopped mix of rocca, lettuce romaine, radish, tomato, "
                           "cucumber, purslane with crispy bread",
        },
        {
            "item_id": 501,
            "section_id": 5,
            "name": "Awsal With Rice",
            "price": 500,
            "description": "Grilled lamb piece, rice, small salad, red chutney",
        },
    ],
}


def load_sample_session(builder: SessionBuilder = None) -> AnalysisResult:
    """Analyze and map the demonstration dataset."""
    builder = builder or SessionBuilder()
    return builder.from_data(
        deepcopy(CHEF_LEBANON_DATA),
        source_name=SAMPLE_SOURCE_NAME,
        session_name="Chef Lebanon sample",
    )
