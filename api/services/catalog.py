"""
Read-only topic catalog. Seeded once from DEFAULT_CATALOG when the topics
table is empty; declaration order is kept in `order_index` because the
recommended-topic pick depends on it.
"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from api.models.models import Topic as DbTopic, TopicModule, User
from api.utils.logger import configure_logging
from lajan.recommend import Topic, recommend_topic

logger = configure_logging()


def _module(mid, title, description, content, key_points, difficulty="beginner"):
    return {
        "id": mid,
        "title": title,
        "description": description,
        "content": content,
        "key_points": list(key_points),
        "difficulty": difficulty,
    }


DEFAULT_CATALOG: tuple[dict, ...] = (
    {
        "id": "basics",
        "title": "Financial Basics",
        "description": "Learn the fundamental concepts of personal finance and money management.",
        "icon": "trending-up",
        "required_points": 190,
        "modules": [
            _module(
                "basics-1", "Understanding Money",
                "Learn about the history and function of money in society.",
                "Money is a medium of exchange that allows people to trade goods and services.",
                ["Money is a medium of exchange.", "It serves as a store of value.", "It acts as a unit of account."],
            ),
            _module(
                "basics-2", "Budgeting 101",
                "Learn how to create and maintain a personal budget.",
                "A budget is a plan for your money that helps you track income and expenses.",
                [
                    "Budgeting helps you track income and expenses.",
                    "The 50/30/20 rule is a popular budgeting method.",
                    "A budget can help you achieve financial goals.",
                ],
            ),
            _module(
                "basics-3", "Saving Strategies",
                "Discover effective ways to save money for your goals.",
                "Saving regularly builds a cushion for emergencies and funds future goals.",
                [
                    "Saving money is essential for financial security.",
                    "An emergency fund is crucial for unexpected expenses.",
                    "Automating savings can help you stay consistent.",
                ],
            ),
        ],
    },
    {
        "id": "investing",
        "title": "Investing Fundamentals",
        "description": "Learn the basics of investing and growing your wealth over time.",
        "icon": "pie-chart",
        "required_points": 190,
        "modules": [
            _module(
                "investing-1", "Investment Basics",
                "Understand the fundamental concepts of investing.",
                "Investing means putting money to work today in exchange for expected future returns.",
                [
                    "Investing involves allocating resources for future returns.",
                    "Stocks represent ownership, while bonds represent debt.",
                    "Diversification reduces risk in investing.",
                ],
            ),
            _module(
                "investing-2", "Risk and Return",
                "Learn about the relationship between risk and potential returns.",
                "Every investment trades some risk for some potential return.",
                [
                    "Higher returns often come with higher risks.",
                    "Risk tolerance varies from person to person.",
                    "Understanding risk is key to making informed investments.",
                ],
                "intermediate",
            ),
        ],
    },
    {
        "id": "credit",
        "title": "Credit and Debt Management",
        "description": "Learn how to manage credit responsibly and handle debt effectively.",
        "icon": "credit-card",
        "required_points": 175,
        "modules": [
            _module(
                "credit-1", "Understanding Credit Scores",
                "Learn what credit scores are and how they impact your financial life.",
                "A credit score summarises how reliably you have repaid borrowed money.",
                [
                    "Credit scores range from 300 to 850.",
                    "Higher scores indicate better creditworthiness.",
                    "Payment history is a key factor in determining credit scores.",
                ],
            ),
            _module(
                "credit-2", "Managing Debt",
                "Learn strategies for managing and reducing debt.",
                "Paying down debt in a deliberate order saves interest and stress.",
                [
                    "The debt snowball method focuses on paying off smaller debts first.",
                    "Debt consolidation combines multiple debts into one loan.",
                    "Creating a budget is essential for effective debt management.",
                ],
                "intermediate",
            ),
        ],
    },
    {
        "id": "banking",
        "title": "Banking and Financial Services",
        "description": "Understand how banks work and how to use financial services effectively.",
        "icon": "landmark",
        "required_points": 60,
        "modules": [
            _module(
                "banking-1", "Types of Bank Accounts",
                "Learn about different types of bank accounts and their purposes.",
                "Banks offer accounts built for spending, for saving and for locking money away.",
                [
                    "Checking accounts are for frequent transactions.",
                    "Savings accounts are for accumulating money over time.",
                    "Certificates of deposit (CDs) offer higher interest rates for fixed terms.",
                ],
            ),
        ],
    },
    {
        "id": "taxes",
        "title": "Tax Basics",
        "description": "Learn the fundamentals of taxation and strategies for tax efficiency.",
        "icon": "file-text",
        "required_points": 110,
        "modules": [
            _module(
                "taxes-1", "Understanding Income Tax",
                "Learn the basics of income tax and how it affects your finances.",
                "Income tax is charged on what you earn; deductions and credits lower the bill.",
                [
                    "Income tax is based on earnings from work or investments.",
                    "Tax deductions reduce taxable income.",
                    "Tax credits directly reduce the amount of tax owed.",
                ],
                "intermediate",
            ),
        ],
    },
    {
        "id": "retirement",
        "title": "Retirement Planning",
        "description": "Learn how to plan and save for a comfortable retirement.",
        "icon": "percent",
        "required_points": 100,
        "modules": [
            _module(
                "retirement-1", "Retirement Account Types",
                "Learn about different retirement accounts and their benefits.",
                "Tax-advantaged accounts are the main tools for retirement saving.",
                [
                    "Traditional IRAs offer tax-deductible contributions.",
                    "Roth IRAs provide tax-free withdrawals in retirement.",
                    "401(k) plans are employer-sponsored retirement accounts.",
                ],
                "intermediate",
            ),
        ],
    },
    {
        "id": "economics",
        "title": "Economics Fundamentals",
        "description": "Understand basic economic principles and how they affect your finances.",
        "icon": "trending-up",
        "required_points": 85,
        "modules": [
            _module(
                "economics-1", "Supply and Demand",
                "Learn about the fundamental economic principle of supply and demand.",
                "Supply and demand explain how prices are set in a market economy.",
                [
                    "Supply and demand determine market prices.",
                    "When demand increases and supply remains constant, prices rise.",
                    "Equilibrium occurs when supply equals demand.",
                ],
            ),
        ],
    },
)


def seed_catalog(db: DBSession, catalog: tuple[dict, ...] = DEFAULT_CATALOG) -> int:
    """Insert the built-in catalog if the topics table is empty. Returns topics added."""
    if db.query(DbTopic.id).first() is not None:
        return 0
    for t_index, entry in enumerate(catalog):
        topic = DbTopic(
            id=entry["id"],
            title=entry["title"],
            description=entry.get("description"),
            icon=entry.get("icon"),
            required_points=entry.get("required_points", 0),
            order_index=t_index,
        )
        topic.modules = [
            TopicModule(order_index=m_index, **module)
            for m_index, module in enumerate(entry.get("modules", []))
        ]
        db.add(topic)
    db.commit()
    logger.info("catalog seeded topics=%s", len(catalog))
    return len(catalog)


def list_topics(db: DBSession) -> list[DbTopic]:
    return db.query(DbTopic).order_by(DbTopic.order_index.asc()).all()


def get_topic(db: DBSession, topic_id: str) -> Optional[DbTopic]:
    return db.get(DbTopic, topic_id)


def to_core_topics(rows: list[DbTopic]) -> list[Topic]:
    return [
        Topic(
            id=row.id,
            required_points=row.required_points or 0,
            title=row.title,
            description=row.description or "",
            module_ids=tuple(m.id for m in row.modules),
        )
        for row in rows
    ]


def recommended_topic(db: DBSession, user: User, today: date) -> Optional[DbTopic]:
    rows = list_topics(db)
    pick = recommend_topic(to_core_topics(rows), set(user.preferred_topics or []), user.points or 0, today)
    if pick is None:
        return None
    return next(row for row in rows if row.id == pick.id)
