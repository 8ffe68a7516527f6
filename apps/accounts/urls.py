from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # POST register/ and login/ return the user with a JWT pair
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # GET user/ -> profile, plan usage, default store
    path('user/', views.current_user, name='current-user'),
    path('user/update/', views.update_current_user, name='update-profile'),
    path('user/password/', views.password_change, name='password-change'),
]
