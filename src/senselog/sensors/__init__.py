"""Sensor-specific parsers and sample caches.

:mod:`imu` turns MPU6050 JSON lines (or legacy CSV lines) into samples and
keeps the newest one per sensor for :class:`~senselog.collectors.imu.ImuCollector`.
"""
