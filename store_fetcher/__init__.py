"""Загрузчик каталога магазина.

Собирает метаданные книг, DVD, Blu-ray и виниловых пластинок,
приводит их к единому формату, исключает товары из чёрного списка,
обогащает ценой и остатком и сохраняет результат.

Запуск: python -m store_fetcher
"""

__version__ = "1.0.0"
