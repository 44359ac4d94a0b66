"""Catalogue back-office: add and edit products."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.01)
    weight = String(max_length=50)
    count_in_stock = Integer(default=0, min_value=0)
    image_url = String(max_length=1024)
    category = String(max_length=100)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    price = Float(min_value=0.01)
    weight = String(max_length=50)
    count_in_stock = Integer(min_value=0)
    image_url = String(max_length=1024)
    category = String(max_length=100)


@storefront.command_handler(part_of=Product)
class ManageProductsHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            name=command.name,
            price=command.price,
            weight=command.weight,
            count_in_stock=command.count_in_stock or 0,
            image_url=command.image_url,
            category=command.category,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            price=command.price,
            weight=command.weight,
            count_in_stock=command.count_in_stock,
            image_url=command.image_url,
            category=command.category,
        )
        repo.add(product)
