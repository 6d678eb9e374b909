"""
Storefront catalog. Order matters: the background scheduler works through it top to bottom.
"""

from storefront_content_system.core.models import ProductCategory, ProductDescriptor

CATALOG = [
    ProductDescriptor(
        id="1",
        name="Complete Calculus I Notes",
        description="Limits, derivatives and integrals explained with worked examples for first-year students.",
        category=ProductCategory.ACADEMIC_NOTES,
        price=249,
        tags=["calculus", "math", "university", "notes"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="2",
        name="Data Structures Crash Course",
        description="Arrays, linked lists, trees, heaps and graphs with complexity cheat sheets.",
        category=ProductCategory.CODING_TECH,
        price=499,
        tags=["dsa", "programming", "interview"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="3",
        name="GATE Computer Science Revision Guide",
        description="High-yield topics and solved previous-year questions for the GATE CS exam.",
        category=ProductCategory.EXAM_PREP,
        price=1199,
        tags=["gate", "exam", "computer science"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="4",
        name="Undated Weekly Planner",
        description="Printable weekly layouts with habit trackers and priority lists.",
        category=ProductCategory.PLANNERS_ORGANIZERS,
        price=99,
        tags=["planner", "productivity", "printable"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="5",
        name="Atomic Habits Workbook",
        description="Exercises for building good habits and breaking bad ones, one small change at a time.",
        category=ProductCategory.PERSONAL_GROWTH,
        price=299,
        tags=["habits", "self-improvement"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="6",
        name="Introductory Microeconomics Notes",
        description="Demand, supply, elasticity and market structures in concise revision notes.",
        category=ProductCategory.ECONOMICS,
        price=600,
        tags=["economics", "micro", "notes"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="7",
        name="Cognitive Biases Field Guide",
        description="Fifty common cognitive biases with everyday examples and how to counter them.",
        category=ProductCategory.PSYCHOLOGY,
        price=349,
        tags=["psychology", "biases", "decision making"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="8",
        name="React Hooks Snippet Library",
        description="Copy-paste custom hooks for data fetching, forms and local storage.",
        category=ProductCategory.CODE_LIBRARIES,
        price=1000,
        tags=["react", "javascript", "hooks", "snippets"],
        has_static_content=True,
    ),
    ProductDescriptor(
        id="9",
        name="Gratitude Journal Template",
        description="A guided daily gratitude journal for tablets and note-taking apps.",
        category=ProductCategory.DIGITAL_JOURNALS,
        price=79,
        tags=["journal", "gratitude", "mindfulness"],
    ),
    ProductDescriptor(
        id="10",
        name="Student Starter Bundle",
        description="Planner, notebook and study guide templates bundled together.",
        category=ProductCategory.BUNDLES,
        price=899,
        tags=["bundle", "students"],
    ),
    ProductDescriptor(
        id="36",
        name="VS Code Keyboard Shortcuts Master Sheet",
        description="Every essential VS Code shortcut for Windows, macOS and Linux.",
        category=ProductCategory.SKILL_DEVELOPMENT,
        price=149,
        tags=["vscode", "shortcuts", "productivity"],
        has_static_content=True,
    ),
]


def get_product(product_id: str):
    """Look up a catalog product by id, or None."""
    for product in CATALOG:
        if product.id == product_id:
            return product
    return None
