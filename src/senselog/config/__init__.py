"""Configuration objects and helpers for senselog.

A session is described by one YAML file:

.. code-block:: yaml

    session:
      output_dir: ~/recordings
      delimiter: ","
      sample_rate_hz: 50
      record_face: true
    recording:
      include_body: false
      include_imu: true
      imu_sensors: [1, 2]

:mod:`runtime` turns it into a :class:`SessionConfig`; :mod:`recording` holds
the per-group toggles that shape the continuous stream's columns.
"""

from .recording import RecordingOptions
from .runtime import SessionConfig, config_from_mapping, load_config, save_config

__all__ = ["RecordingOptions", "SessionConfig", "config_from_mapping", "load_config", "save_config"]
