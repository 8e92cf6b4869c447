from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    key: str
    label: str
    icon: str
    type: str           # 'income' | 'expense'
    workspace: str      # 'personal' | 'tuition'


_TABLE = {
    "personal": {
        "income": [
            ("salary", "Salary", "💰"),
            ("freelance", "Freelance", "💻"),
            ("business", "Business", "🏢"),
            ("investment", "Investment", "📈"),
            ("gift", "Gift", "🎁"),
            ("other_income", "Other Income", "💵"),
        ],
        "expense": [
            ("food", "Food & Dining", "🍽️"),
            ("transport", "Transportation", "🚗"),
            ("shopping", "Shopping", "🛍️"),
            ("entertainment", "Entertainment", "🎬"),
            ("bills", "Bills & Utilities", "📄"),
            ("healthcare", "Healthcare", "🏥"),
            ("education", "Education", "📚"),
            ("travel", "Travel", "✈️"),
            ("other_expense", "Other Expense", "💸"),
        ],
    },
    "tuition": {
        "income": [
            ("student_fee", "Student Fee", "🎓"),
            ("admission_fee", "Admission Fee", "📝"),
            ("extra_classes", "Extra Classes", "📖"),
        ],
        "expense": [
            ("rent", "Rent", "🏠"),
            ("utility_bills", "Utility Bills", "⚡"),
            ("staff_salary", "Staff Salary", "👥"),
            ("stationery", "Stationery", "📝"),
            ("internet", "Internet", "🌐"),
            ("other_expense", "Other Expense", "💸"),
        ],
    },
}

DEFAULT_CATEGORIES: dict[str, dict[str, list[Category]]] = {
    ws: {
        type_: [Category(k, label, icon, type_, ws) for k, label, icon in rows]
        for type_, rows in types.items()
    }
    for ws, types in _TABLE.items()
}

CATEGORY_INFO: dict[str, Category] = {}
for _types in DEFAULT_CATEGORIES.values():
    for _cats in _types.values():
        for _cat in _cats:
            CATEGORY_INFO.setdefault(_cat.key, _cat)


def categories_for(workspace: str, type_: str) -> list[Category]:
    return list(DEFAULT_CATEGORIES.get(workspace, {}).get(type_, []))


def category_label(key: str) -> str:
    cat = CATEGORY_INFO.get(key)
    return cat.label if cat else key


def category_icon(key: str) -> str:
    cat = CATEGORY_INFO.get(key)
    return cat.icon if cat else "📌"
