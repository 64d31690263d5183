"""
conftest.py
-----------
Shared pytest fixtures for devname tests.

Provides fixtures for:
- A sample configuration export (as parsed JSON and as a file)
- A temporary registry database
"""
import json
from pathlib import Path

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine

BASE = "zwavejs2mqtt_0xc0ffee"

KEY_DIMMER = f"{BASE}_38-0-currentValue"
KEY_POWER = f"{BASE}_50-0-value-66049"
KEY_TEMP = f"{BASE}_49-0-Air_temperature"
KEY_LUX = f"{BASE}_49-0-Illuminance"
KEY_MOTION = f"{BASE}_113-0-Home_Security-Motion_sensor_status"


def _discovery(identifier):
    return {"discovery_payload": {"device": {"identifiers": [identifier]}}}


@pytest.fixture
def export_data():
    """Node export with a null placeholder, a dimmer and a multisensor."""
    return [
        None,
        {
            "id": 2,
            "loc": "Living Room",
            "name": "Dimmer",
            "values": [
                {"id": "38-0-currentValue", "label": "Current value"},
                {"id": "50-0-value-66049", "label": "Electric Consumption [W]"},
            ],
            "hassDevices": {"light_dimmer": _discovery(f"{BASE}_node2")},
        },
        {
            "id": 3,
            "loc": "Kitchen",
            "name": "Sensor",
            "values": [
                {"id": "49-0-Air temperature", "label": "Air temperature"},
                {"id": "49-0-Illuminance", "label": "Illuminance"},
                {"id": "113-0-Home Security-Motion sensor status", "label": "Motion sensor status"},
            ],
            "hassDevices": {"sensor_temp": _discovery(f"{BASE}_node3")},
        },
    ]


@pytest.fixture
def stored_names():
    """Registry names for the sample export (illuminance is missing)."""
    return {
        KEY_DIMMER: "Old dimmer",
        KEY_POWER: "$Power",
        KEY_TEMP: "Kitchen - Sensor - Temp",
        KEY_MOTION: "Motion  Kitchen",
        "other_device": "Keep me",
    }


@pytest.fixture
def config_file(tmp_path, export_data):
    """Sample export written to disk."""
    path = tmp_path / "nodes.json"
    path.write_text(json.dumps(export_data), encoding="utf-8")
    return path


def create_registry(path: Path, names: dict, extra_rows=()) -> Path:
    """Create a DeviceStatus table holding names, then any (key, name) extra_rows."""
    engine = create_engine(f"sqlite:///{path}")
    metadata = MetaData()
    table = Table(
        "DeviceStatus",
        metadata,
        Column("ID", Integer, primary_key=True),
        Column("DeviceID", String),
        Column("Name", String),
        Column("Used", Integer, default=1),
    )
    metadata.create_all(engine)
    with engine.begin() as conn:
        for key, name in names.items():
            conn.execute(table.insert().values(DeviceID=key, Name=name))
        for key, name in extra_rows:
            conn.execute(table.insert().values(DeviceID=key, Name=name))
    engine.dispose()
    return path


@pytest.fixture
def db_file(tmp_path, stored_names):
    """Registry database holding stored_names."""
    return create_registry(tmp_path / "domoticz.db", stored_names)
