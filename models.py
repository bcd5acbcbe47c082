# models.py

from sqlalchemy import (Column, Integer, String, DateTime, Text,
                        ForeignKey, BIGINT, Index)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base


PRODUCT_STATUSES = ("draft", "pending", "private", "published")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=True)


class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)

    product_links = relationship("ProductCategory", back_populates="category", cascade="all, delete-orphan")


class Product(Base):
    __tablename__ = "products"
    id = Column(BIGINT().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    title = Column(String(255))
    status = Column(String(50), nullable=False, default="published", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    attributes = relationship("ProductAttribute", back_populates="product", cascade="all, delete-orphan")
    category_links = relationship(
        "ProductCategory",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductCategory.position",
    )


class ProductAttribute(Base):
    """Sparse key/value attribute row; one per (product, attribute name)."""
    __tablename__ = "product_attributes"
    product_id = Column(BIGINT().with_variant(Integer, "sqlite"), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    name = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False, default="")

    product = relationship("Product", back_populates="attributes")

    __table_args__ = (
        Index("ix_product_attributes_name", "name"),
    )


class ProductCategory(Base):
    __tablename__ = "product_categories"
    product_id = Column(BIGINT().with_variant(Integer, "sqlite"), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)
    # Insertion order of the category on this product
    position = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="category_links")
    category = relationship("Category", back_populates="product_links")
