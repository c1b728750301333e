from django.urls import path
from . import views

app_name = 'purchases'

urlpatterns = [
    # POST /api/items/{id}/reserve/  - Reserve (or refresh) an item
    # POST /api/items/{id}/confirm/  - Confirm purchase of a reserved item
    # POST /api/items/{id}/release/  - Release own reservation
    # POST /api/items/{id}/unmark/   - Undo a purchase
    path('<uuid:item_id>/reserve/', views.reserve_item, name='item-reserve'),
    path('<uuid:item_id>/confirm/', views.confirm_item_purchase, name='item-confirm'),
    path('<uuid:item_id>/release/', views.release_item, name='item-release'),
    path('<uuid:item_id>/unmark/', views.unmark_item_purchase, name='item-unmark'),
]
