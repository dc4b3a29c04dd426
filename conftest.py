import copy

import pytest

SCEN_INFO = {
    "home_info": {"home_name": "Home", "charging_power": "12.50", "power_unit": "W"},
    "grid_info": {"grid_to_home_power": "150", "photovoltaic_to_grid_power": "0",
                  "grid_status": "1"},
    "solarbank_info": {
        "solarbank_list": [
            {"device_pn": "A17C0", "device_sn": "SB1", "device_name": "Solarbank 2 E1600 Pro",
             "battery_power": "87", "charging_power": "120", "output_power": "300",
             "photovoltaic_power": "420", "power_unit": "W"},
            {"device_pn": "A17C2", "device_sn": "SB2", "device_name": "Solarbank 2 AC",
             "battery_power": "54", "charging_power": "0", "output_power": "200",
             "photovoltaic_power": "0", "power_unit": "W"},
        ],
        "total_charging_power": "120",
        "power_unit": "W",
        "total_battery_power": "0.70",
        "updated_time": "2024-07-01 12:00:00",
        "total_photovoltaic_power": "420",
        "total_output_power": "500.00",
        "solar_power_1": "110",
        "solar_power_2": "100",
        "solar_power_3": "105",
        "solar_power_4": "105",
        "to_home_load": "500",
    },
    "statistics": [
        {"type": "1", "total": "1234.56", "unit": "kwh"},
        {"type": "2", "total": "1230.3", "unit": "kg"},
        {"type": "3", "total": "370.37", "unit": "€"},
    ],
    "home_load_power": "450",
    "other_loads_power": "50",
    "site_id": "site-1",
}

SITE_HOMEPAGE = {
    "site_list": [
        {"site_id": "site-1", "site_name": "Balcony", "ms_type": 2, "power_site_type": 11},
        {"site_id": "site-2", "site_name": "Garage", "ms_type": 2, "power_site_type": 11},
    ],
    "solar_list": [],
    "pps_list": [],
}


@pytest.fixture
def scen_info_payload():
    return copy.deepcopy(SCEN_INFO)


@pytest.fixture
def site_homepage_payload():
    return copy.deepcopy(SITE_HOMEPAGE)
