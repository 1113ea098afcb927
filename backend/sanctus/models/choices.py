# Overview: Closed value sets stored as strings (SCREAMING_SNAKE_CASE on the wire).

TRANSACTION_CATEGORIES = (
    "TITHE",
    "OFFERTORY",
    "THANKSGIVING",
    "DONATION",
    "FUNDRAISING",
    "MASS_OFFERING",
    "WEDDING_FEE",
    "BAPTISM_FEE",
    "FUNERAL_FEE",
    "CERTIFICATE_FEE",
    "RENT_INCOME",
    "INVESTMENT_INCOME",
    "OTHER_INCOME",
    "SALARY_EXPENSE",
    "UTILITIES_EXPENSE",
    "MAINTENANCE_EXPENSE",
    "SUPPLIES_EXPENSE",
    "DIOCESAN_LEVY",
    "CHARITY_EXPENSE",
    "CONSTRUCTION_EXPENSE",
    "OTHER_EXPENSE",
)

PAYMENT_METHODS = (
    "CASH",
    "CHEQUE",
    "BANK_TRANSFER",
    "MPESA",
    "TIGO_PESA",
    "AIRTEL_MONEY",
    "HALOPESA",
    "CREDIT_CARD",
    "OTHER",
)

APPROVAL_STATUSES = ("PENDING", "APPROVED", "REJECTED", "CANCELLED")

GENDERS = ("MALE", "FEMALE")

MARITAL_STATUSES = ("SINGLE", "MARRIED", "WIDOWED", "SEPARATED", "DIVORCED")

SACRAMENT_TYPES = (
    "BAPTISM",
    "FIRST_COMMUNION",
    "CONFIRMATION",
    "MARRIAGE",
    "HOLY_ORDERS",
    "ANOINTING_OF_SICK",
)

FAMILY_ROLES = ("HEAD", "SPOUSE", "MEMBER")
