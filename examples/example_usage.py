"""Example: use the service layer directly, without Flask.

Controllers are a thin layer; the business rules live in the services.
"""

import importlib

from config import get_settings_module

from src.school_manager.school_manager.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    for balance in container.balance_service.student_balances(academic_year_id=1)[:5]:
        print(balance.student_name, balance.total_due, balance.total_paid, balance.remaining, balance.status.value)

    stats = container.report_service.collection_stats(academic_year_id=1)
    print(f"paid={stats.paid_count} partial={stats.partial_count} unpaid={stats.unpaid_count}")


if __name__ == "__main__":
    main()
