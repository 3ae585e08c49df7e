"""Institute management with QR-code attendance.

Feature modules follow the same layering: ``model`` (frozen dataclasses),
``repository`` (Protocol), ``mysql_*_repository`` (mysql-connector),
``service`` (use cases) and ``controller`` (Flask routes).
"""
