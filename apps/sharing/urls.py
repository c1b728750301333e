from django.urls import path
from . import views

app_name = 'sharing'

urlpatterns = [
    # POST   /api/sharing/shares/                              - Create or update a share
    # POST   /api/sharing/shares/batch/                        - Share with many emails
    # DELETE /api/sharing/shares/{id}/                         - Revoke a share
    # POST   /api/sharing/lists/{id}/guest-link/               - Mint a guest link
    # DELETE /api/sharing/lists/{id}/guest-link/               - Revoke the guest link
    # POST   /api/sharing/invites/                             - Create an invite code
    # POST   /api/sharing/invites/redeem/                      - Redeem an invite code
    # POST   /api/sharing/locations/{id}/members/              - Add a location member
    # DELETE /api/sharing/locations/{id}/members/{user_id}/    - Remove a location member
    path('shares/', views.share_create, name='share-create'),
    path('shares/batch/', views.share_batch, name='share-batch'),
    path('shares/<uuid:share_id>/', views.share_revoke, name='share-revoke'),
    path('lists/<uuid:list_id>/guest-link/', views.guest_link, name='guest-link'),
    path('invites/', views.invite_create, name='invite-create'),
    path('invites/redeem/', views.invite_redeem, name='invite-redeem'),
    path('locations/<uuid:location_id>/members/', views.member_add, name='member-add'),
    path('locations/<uuid:location_id>/members/<uuid:user_id>/', views.member_remove, name='member-remove'),
]
