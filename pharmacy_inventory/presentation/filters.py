"""Jinja filters shared by every page."""

from datetime import date, datetime


def format_day(value):
    if not value:
        return '-'
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime('%d/%m/%Y')
    return str(value)


def format_moment(value):
    if not value:
        return '-'
    if isinstance(value, datetime):
        return value.strftime('%d/%m/%Y %H:%M')
    return format_day(value)


def register_template_filters(app):
    app.add_template_filter(format_day, 'day')
    app.add_template_filter(format_moment, 'moment')
