"""Association tables shared by catalogue entities."""

from sqlmodel import Field, SQLModel


class ProductCategoryLink(SQLModel, table=True):
    """Many-to-many link between products and categories."""

    __tablename__ = "product_categories"

    product_id: str = Field(foreign_key="products.id", primary_key=True)
    category_id: str = Field(foreign_key="categories.id", primary_key=True, index=True)
