from fastedge_deploy.main import app

app(prog_name="fastedge-deploy")
