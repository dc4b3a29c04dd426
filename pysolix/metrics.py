import logging
import time
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from pysolix.data import ScenInfo

log = logging.getLogger(__name__)

PREFIX = "anker_solix_"
LABELS = ["site_id", "unit"]
SOLARBANK_LABELS = ["site_id", "unit", "device_sn"]

# Grid and load figures carry no unit in the document
GRID_UNIT = "W"

# name, help - site level gauges
SITE_GAUGES = [
    ("home_load_power", "Home load power"),
    ("other_load_power", "Other load power"),
    ("grid_to_home_power", "Grid to home power"),
    ("photovoltaic_to_grid_power", "Photovoltaic to grid power"),
    ("home_charging_power", "Home charging power"),
    ("statistics_total_power", "Statistics total power"),
    ("statistics_total_co2", "Statistics total CO2"),
    ("statistics_total_money", "Statistics total money"),
    ("solar_power_1", "Solar power 1"),
    ("solar_power_2", "Solar power 2"),
    ("solar_power_3", "Solar power 3"),
    ("solar_power_4", "Solar power 4"),
    ("solarbank_total_battery_power", "Solarbank total battery power"),
    ("solarbank_total_charging_power", "Solarbank total charging power"),
    ("solarbank_total_output_power", "Solarbank total output power"),
    ("solarbank_total_photovoltaic_power", "Solarbank total photovoltaic power"),
]

# name, help - per solarbank gauges
SOLARBANK_GAUGES = [
    ("solarbank_battery_power", "Solarbank power percent"),
    ("solarbank_charging_power", "Solarbank charging power"),
    ("solarbank_output_power", "Solarbank output power"),
    ("solarbank_photovoltaic_power", "Solarbank photovoltaic power"),
]

# Order of the entries in ScenInfo.statistics
STATISTICS = ["statistics_total_power", "statistics_total_co2", "statistics_total_money"]


class Metrics:
    """
    Last known value of every telemetry series, rendered for Prometheus.

    A series that is missing from a later document keeps its previous value.
    """

    def __init__(self):
        self.registry = CollectorRegistry()
        self.gauges = {}
        for name, description in SITE_GAUGES:
            self.gauges[name] = Gauge(PREFIX + name, description, LABELS, registry=self.registry)
        for name, description in SOLARBANK_GAUGES:
            self.gauges[name] = Gauge(PREFIX + name, description, SOLARBANK_LABELS,
                                      registry=self.registry)
        self.last_update: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.last_update is not None

    def set(self, name: str, value, **labels):
        self.gauges[name].labels(**labels).set(value)

    def update(self, site_id: str, scen_info: ScenInfo):
        grid = {"site_id": site_id, "unit": GRID_UNIT}
        self.set("home_load_power", scen_info.home_load_power, **grid)
        self.set("other_load_power", scen_info.other_loads_power, **grid)
        self.set("grid_to_home_power", scen_info.grid_info.grid_to_home_power, **grid)
        self.set("photovoltaic_to_grid_power", scen_info.grid_info.photovoltaic_to_grid_power, **grid)

        self.set("home_charging_power", scen_info.home_info.charging_power,
                 site_id=site_id, unit=scen_info.home_info.power_unit)

        if len(scen_info.statistics) < len(STATISTICS):
            log.debug(f"Site {site_id} reported {len(scen_info.statistics)} statistics - "
                      "keeping last known values for the rest")
        for name, statistic in zip(STATISTICS, scen_info.statistics):
            self.set(name, statistic.total, site_id=site_id, unit=statistic.unit)

        info = scen_info.solarbank_info
        solar = {"site_id": site_id, "unit": info.power_unit}
        self.set("solar_power_1", info.solar_power_1, **solar)
        self.set("solar_power_2", info.solar_power_2, **solar)
        self.set("solar_power_3", info.solar_power_3, **solar)
        self.set("solar_power_4", info.solar_power_4, **solar)

        for bank in info.solarbank_list:
            labels = {"site_id": site_id, "unit": bank.power_unit, "device_sn": bank.device_sn}
            self.set("solarbank_battery_power", bank.battery_power, **labels)
            self.set("solarbank_charging_power", bank.charging_power, **labels)
            self.set("solarbank_output_power", bank.output_power, **labels)
            self.set("solarbank_photovoltaic_power", bank.photovoltaic_power, **labels)

        self.set("solarbank_total_battery_power", info.total_battery_power, **solar)
        self.set("solarbank_total_charging_power", info.total_charging_power, **solar)
        self.set("solarbank_total_output_power", info.total_output_power, **solar)
        self.set("solarbank_total_photovoltaic_power", info.total_photovoltaic_power, **solar)

        self.last_update = time.time()
        log.info(f"Updated metrics for site {site_id}")

    def render(self) -> str:
        return generate_latest(self.registry).decode('utf-8')
