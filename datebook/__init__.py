# datebook/__init__.py
"""
Личный календарь: события, повторяющиеся серии, конфликты по времени
и сетки месяц/неделя/день. HTTP-приложение живёт в ``datebook.main``.
"""
