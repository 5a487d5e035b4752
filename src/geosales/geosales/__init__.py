"""GeoSales field attendance package.

Organized by feature modules (geo, attendance, tracking, users, meetings,
reports) with a thin Flask controller layer over service/repository layers.
The geofence engine itself (geo, attendance, tracking) has no Flask imports.
"""
