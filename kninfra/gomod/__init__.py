"""Direct dependencies of Go modules and selection of modules by domain."""