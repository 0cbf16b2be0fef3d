"""
Sample FLIP project: a single-family home bought, renovated and resold.

Scenario 2 is optimistic (higher sale price, cheaper kitchen and
bathroom), scenario 3 pessimistic.
"""

from datetime import date

SAMPLE_FLIP = {
    "actions": {
        "flip_plan": "Full renovation",
        "acquisition_date": date(2025, 4, 1),
        "expected_sale_date": date(2025, 10, 1),
        "holding_period_months": 6,
    },
    "general_info": {
        "address": "123 Rue Principale",
        "city": "Montréal",
        "province": "Québec",
        "postal_code": "H1A 1A1",
        "property_type": "Single-family",
        "year_built": 1975,
        "lot_size": 5000,
        "building_size": 2000,
        "number_of_bedrooms": 3,
        "number_of_bathrooms": 2,
        "parking_spaces": 1,
        "description": "House to renovate in a sought-after neighbourhood",
    },
    "acquisition_costs": {
        "purchase_price": 300000,
        "transfer_tax": 3000,
        "legal_fees": 1500,
        "inspection_fees": 500,
        "appraisal_fees": 350,
        "mortgage_insurance": 0,
        "mortgage_setup_fees": 250,
        "other_acquisition_fees": 200,
    },
    "renovation_costs": {
        "kitchen": 25000,
        "bathroom": 15000,
        "flooring": 10000,
        "painting": 5000,
        "windows": 8000,
        "doors": 3000,
        "roofing": 0,
        "electrical": 5000,
        "plumbing": 4000,
        "hvac": 0,
        "foundation": 0,
        "exterior": 6000,
        "landscape": 2000,
        "permits": 1000,
        "labor_costs": 20000,
        "materials": 15000,
        "contingency": 10000,
        "other_renovation_costs": 1000,
    },
    "selling_costs": {
        "real_estate_commission": 12000,
        "legal_fees_for_sale": 1200,
        "marketing_costs": 500,
        "staging_costs": 2000,
        "prepayment_penalty": 0,
        "other_selling_costs": 300,
    },
    "revenues": {
        "expected_sale_price": 450000,
        "rental_income": 0,
        "other_revenues": 0,
    },
    "holding_costs": {
        "property_taxes": 3600,  # annual
        "insurance": 1200,  # annual
        "utilities": 200,
        "maintenance": 100,
        "other_holding_costs": 50,
    },
    "maintenance_costs": {
        "repairs": 0,
        "cleaning": 100,
        "landscaping": 150,
        "snow_removal": 0,
        "other_maintenance_costs": 0,
    },
    "property_financing": {
        "down_payment": 60000,
        "down_payment_percentage": 20,
        "first_mortgage_amount": 240000,
        "first_mortgage_rate": 4.5,
        "first_mortgage_term": 5,
        "first_mortgage_amortization": 25,
    },
    "renovation_financing": {
        "personal_funds": 30000,
        "credit_line_amount": 100000,
        "credit_line_rate": 6.5,
    },
}

OPTIMISTIC_UPDATE = {
    "revenues": {"expected_sale_price": 480000},
    "renovation_costs": {"kitchen": 20000, "bathroom": 12000},
}

PESSIMISTIC_UPDATE = {
    "revenues": {"expected_sale_price": 420000},
    "renovation_costs": {"kitchen": 30000, "bathroom": 18000, "contingency": 15000},
}
