# pySolix - Cloud Data Model
# -*- coding: utf-8 -*-
"""
 Decoders for Anker Solix cloud responses

 Every response is wrapped in an envelope:

    success:  {"code": 0, "data": {...}, "msg": "success!"}
    failure:  {"code": 10000, "msg": "invalid request"}

 There is no explicit tag, the presence of "data" decides the variant.

 Numeric telemetry arrives string encoded ("123", "1.5"). Each field is parsed
 as int or float when the document is decoded; a single bad field rejects the
 whole document.
"""
import re
from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union

from pysolix.exceptions import DecodeError

# Unsigned integers and plain decimals, ASCII digits only
INT_PATTERN = re.compile(r"\+?[0-9]+")
FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


@dataclass
class DataResponse:
    code: int
    data: Any
    msg: str


@dataclass
class NoDataResponse:
    code: int
    msg: str


def decode_envelope(payload: Any) -> Union[DataResponse, NoDataResponse]:
    if not isinstance(payload, dict):
        raise DecodeError(f"Response envelope is not an object: {payload!r}")
    code = _int(payload, 'code', 'envelope')
    msg = payload.get('msg', '')
    if not isinstance(msg, str):
        msg = str(msg)
    # "data": null is treated like a missing "data"
    if payload.get('data') is not None:
        return DataResponse(code, payload['data'], msg)
    return NoDataResponse(code, msg)


def _get(data: Any, key: str, path: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected object at {path}, got {type(data).__name__}")
    if key not in data:
        raise DecodeError(f"Missing field {path}.{key}")
    return data[key]


def _int(data: dict, key: str, path: str) -> int:
    value = _get(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise DecodeError(f"Invalid integer for {path}.{key}: {value!r}")
    if isinstance(value, str) and not INT_PATTERN.fullmatch(value):
        raise DecodeError(f"Invalid integer for {path}.{key}: {value!r}")
    return int(value)


def _float(data: dict, key: str, path: str) -> float:
    value = _get(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise DecodeError(f"Invalid number for {path}.{key}: {value!r}")
    if isinstance(value, str) and not FLOAT_PATTERN.fullmatch(value):
        raise DecodeError(f"Invalid number for {path}.{key}: {value!r}")
    return float(value)


def _str(data: dict, key: str, path: str) -> str:
    value = _get(data, key, path)
    if not isinstance(value, str):
        raise DecodeError(f"Invalid string for {path}.{key}: {value!r}")
    return value


def _list(data: dict, key: str, path: str) -> list:
    value = _get(data, key, path)
    if not isinstance(value, list):
        raise DecodeError(f"Invalid list for {path}.{key}: {value!r}")
    return value


@dataclass(frozen=True)
class Login:
    auth_token: str
    token_expires_at: int
    user_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "Login":
        return cls(auth_token=_str(data, 'auth_token', 'login'),
                   token_expires_at=_int(data, 'token_expires_at', 'login'),
                   user_id=_str(data, 'user_id', 'login'))


@dataclass(frozen=True)
class Solarbank:
    battery_power: int
    charging_power: int
    output_power: int
    photovoltaic_power: int
    power_unit: str
    device_sn: str

    @classmethod
    def from_dict(cls, data: dict, path: str = 'solarbank') -> "Solarbank":
        return cls(battery_power=_int(data, 'battery_power', path),
                   charging_power=_int(data, 'charging_power', path),
                   output_power=_int(data, 'output_power', path),
                   photovoltaic_power=_int(data, 'photovoltaic_power', path),
                   power_unit=_str(data, 'power_unit', path),
                   device_sn=_str(data, 'device_sn', path))


@dataclass(frozen=True)
class SolarbankInfo:
    solar_power_1: int
    solar_power_2: int
    solar_power_3: int
    solar_power_4: int
    to_home_load: int
    total_battery_power: float
    total_charging_power: int
    total_output_power: float
    total_photovoltaic_power: int
    power_unit: str
    solarbank_list: List[Solarbank] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict, path: str = 'solarbank_info') -> "SolarbankInfo":
        banks = [Solarbank.from_dict(bank, f"{path}.solarbank_list[{i}]")
                 for i, bank in enumerate(_list(data, 'solarbank_list', path))]
        return cls(solar_power_1=_int(data, 'solar_power_1', path),
                   solar_power_2=_int(data, 'solar_power_2', path),
                   solar_power_3=_int(data, 'solar_power_3', path),
                   solar_power_4=_int(data, 'solar_power_4', path),
                   to_home_load=_int(data, 'to_home_load', path),
                   total_battery_power=_float(data, 'total_battery_power', path),
                   total_charging_power=_int(data, 'total_charging_power', path),
                   total_output_power=_float(data, 'total_output_power', path),
                   total_photovoltaic_power=_int(data, 'total_photovoltaic_power', path),
                   power_unit=_str(data, 'power_unit', path),
                   solarbank_list=banks)


@dataclass(frozen=True)
class Statistic:
    total: float
    type: int
    unit: str

    @classmethod
    def from_dict(cls, data: dict, path: str = 'statistics') -> "Statistic":
        return cls(total=_float(data, 'total', path),
                   type=_int(data, 'type', path),
                   unit=_str(data, 'unit', path))


@dataclass(frozen=True)
class GridInfo:
    grid_to_home_power: int
    photovoltaic_to_grid_power: int

    @classmethod
    def from_dict(cls, data: dict, path: str = 'grid_info') -> "GridInfo":
        return cls(grid_to_home_power=_int(data, 'grid_to_home_power', path),
                   photovoltaic_to_grid_power=_int(data, 'photovoltaic_to_grid_power', path))


@dataclass(frozen=True)
class HomeInfo:
    charging_power: float
    power_unit: str

    @classmethod
    def from_dict(cls, data: dict, path: str = 'home_info') -> "HomeInfo":
        return cls(charging_power=_float(data, 'charging_power', path),
                   power_unit=_str(data, 'power_unit', path))


@dataclass(frozen=True)
class ScenInfo:
    """Telemetry document of one site (get_scen_info)"""
    grid_info: GridInfo
    home_info: HomeInfo
    solarbank_info: SolarbankInfo
    statistics: List[Statistic]
    home_load_power: int
    other_loads_power: int

    @classmethod
    def from_dict(cls, data: dict) -> "ScenInfo":
        path = 'scen_info'
        statistics = [Statistic.from_dict(stat, f"{path}.statistics[{i}]")
                      for i, stat in enumerate(_list(data, 'statistics', path))]
        return cls(grid_info=GridInfo.from_dict(_get(data, 'grid_info', path)),
                   home_info=HomeInfo.from_dict(_get(data, 'home_info', path)),
                   solarbank_info=SolarbankInfo.from_dict(_get(data, 'solarbank_info', path)),
                   statistics=statistics,
                   home_load_power=_int(data, 'home_load_power', path),
                   other_loads_power=_int(data, 'other_loads_power', path))


@dataclass(frozen=True)
class Site:
    site_id: str
    site_name: str


@dataclass(frozen=True)
class SiteHomepage:
    site_list: List[Site]

    @classmethod
    def from_dict(cls, data: dict) -> "SiteHomepage":
        sites = []
        for i, site in enumerate(_list(data, 'site_list', 'site_homepage')):
            path = f"site_homepage.site_list[{i}]"
            sites.append(Site(site_id=_str(site, 'site_id', path),
                              site_name=_str(site, 'site_name', path)))
        return cls(site_list=sites)

    def sites(self) -> List[Tuple[str, str]]:
        return [(site.site_id, site.site_name) for site in self.site_list]
