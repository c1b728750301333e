from django.urls import path
from . import views

app_name = 'wishlists'

urlpatterns = [
    # GET /api/lists/                  - Lists visible to the caller
    # GET /api/lists/{id}/summary/     - Totals (purchase figures hidden from owner)
    # GET /api/lists/{id}/items/       - Items (purchase state hidden from owner)
    path('', views.accessible_lists, name='list-index'),
    path('<uuid:list_id>/summary/', views.list_summary, name='list-summary'),
    path('<uuid:list_id>/items/', views.list_items, name='list-items'),
]
